"""Generation Pipeline - diff in, sanitized commit message or branch name out.

    compress_diff -> build_*_prompt -> llm.generate -> sanitize_*

Each call owns its inputs; nothing is cached or shared between calls, and
provider errors propagate unchanged.
"""

from dataclasses import dataclass

from sage.config import Config
from sage.git.diff_processor import compress_diff
from sage.llm import AiResponse, ProviderCredentials, generate
from sage.prompts import CommitStyle, PromptContext
from sage.sanitize import sanitize_branch_name, sanitize_commit_message


@dataclass(frozen=True)
class GenerationContext:
    """Provider selection and limits for one invocation."""
    provider: str
    credentials: ProviderCredentials
    max_tokens: int | None = None
    default_style: CommitStyle | None = None

    @classmethod
    def from_config(cls, config: Config) -> 'GenerationContext':
        name, provider_config = config.get_active_provider_config()
        return cls(
            provider=name,
            credentials=provider_config.credentials(),
            max_tokens=config.max_tokens,
            default_style=CommitStyle.parse(config.default_style),
        )


def generate_commit_message(ctx: GenerationContext, diff: str, files_changed: str,
                            style: CommitStyle | None = None, context: str = "") -> AiResponse:
    prompt = PromptContext(
        files_changed=files_changed,
        diff=compress_diff(diff),
        context=context,
        style=style or ctx.default_style,
    ).render_commit()

    response = generate(ctx.provider, ctx.credentials, prompt, ctx.max_tokens)
    return AiResponse(message=sanitize_commit_message(response.message), usage=response.usage)


def generate_branch_name(ctx: GenerationContext, diff: str, files_changed: str,
                         context: str = "") -> AiResponse:
    prompt = PromptContext(
        files_changed=files_changed,
        diff=compress_diff(diff),
        context=context,
    ).render_branch()

    response = generate(ctx.provider, ctx.credentials, prompt, ctx.max_tokens)
    return AiResponse(message=sanitize_branch_name(response.message), usage=response.usage)
