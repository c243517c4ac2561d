"""Agent prompt and tool-use loop.

The model reaches PostHog's MCP server directly through the API's MCP
connector and calls the local tools in :mod:`posthog_wizard.agent.tools`
through ordinary tool use. The loop ends when the model stops asking for
tools or the turn limit is reached.

The model reports progress and blocking problems with signal markers in
its text output:

``[STATUS] <message>``
    Progress shown to the user.
``[ERROR-MCP-MISSING]``
    The MCP server could not be reached; raises :class:`McpMissingError`.
``[ERROR-RESOURCE-MISSING]``
    No setup skill fits the project; raises :class:`ResourceMissingError`.
"""

from __future__ import annotations

import logging
import os
import re
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from posthog_wizard.agent.sdk import import_anthropic
from posthog_wizard.agent.tools import WizardTools
from posthog_wizard.constants import CloudRegion
from posthog_wizard.exceptions import AgentError, McpMissingError, RateLimitError, ResourceMissingError
from posthog_wizard.frameworks.base import Context, FrameworkConfig

logger = logging.getLogger(__name__)

SIGNAL_STATUS = "[STATUS]"
SIGNAL_ERROR_MCP_MISSING = "[ERROR-MCP-MISSING]"
SIGNAL_ERROR_RESOURCE_MISSING = "[ERROR-RESOURCE-MISSING]"

_STATUS_RE = re.compile(rf"^.*{re.escape(SIGNAL_STATUS)}\s*(.+?)$", re.MULTILINE)

DEFAULT_AGENT_MODEL = "claude-opus-4-5-20251101"
MCP_CONNECTOR_BETA = "mcp-client-2025-04-04"
DEFAULT_MAX_TOKENS = 16000
DEFAULT_MAX_TURNS = 200

LOCAL_MCP_URL = "http://localhost:8787/mcp"
US_MCP_URL = "https://mcp.posthog.com/mcp"
EU_MCP_URL = "https://mcp-eu.posthog.com/mcp"

SYSTEM_PROMPT = (
    "You are the PostHog setup wizard. You integrate PostHog into the user's project "
    "by editing files with the tools provided. Keep changes minimal and idiomatic for "
    "the project. Never print secret values. Report progress on its own line as "
    f"'{SIGNAL_STATUS} <short message>'."
)


@dataclass
class AgentResult:
    """Outcome of a completed agent run.

    Attributes:
        text: Concatenated assistant text.
        turns: Number of model calls made.
        duration_seconds: Wall-clock time of the run.
        written_files: Project files the agent wrote.
    """

    text: str
    turns: int
    duration_seconds: float
    written_files: list[str] = field(default_factory=list)


def get_mcp_url(
    region: CloudRegion | str,
    local: bool = False,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Pick the MCP endpoint: ``--local-mcp``, then ``MCP_URL``, then the region default."""
    if local:
        return LOCAL_MCP_URL
    env = os.environ if environ is None else environ
    if env.get("MCP_URL"):
        return env["MCP_URL"]
    return EU_MCP_URL if CloudRegion(region) == CloudRegion.EU else US_MCP_URL


def build_integration_prompt(
    config: FrameworkConfig,
    framework_version: str | None,
    typescript: bool,
    project_api_key: str,
    host: str,
    context: Context,
) -> str:
    """Build the instructions sent to the agent for one framework."""
    lines = config.prompts.get_additional_context_lines(context)
    additional = "".join(f"\n- {line}" for line in lines)
    name = config.name
    env_file = config.environment.env_file

    return f"""You have access to the PostHog MCP server which provides skills to integrate PostHog into this {name} project.

Project context:
- Framework: {name} {framework_version or 'latest'}
- TypeScript: {'Yes' if typescript else 'No'}
- PostHog API Key: {project_api_key}
- PostHog Host: {host}{additional}

{config.prompts.project_type_detection}

Instructions (follow these steps IN ORDER - do not skip or reorder):

STEP 1: List the available skills using the PostHog MCP server tools. If you cannot access the MCP server, you must emit: {SIGNAL_ERROR_MCP_MISSING} Could not access the PostHog MCP server and halt.

   Review the skill descriptions and choose the one that best matches this project's framework and configuration.
   If no suitable skill is found, you emit: {SIGNAL_ERROR_RESOURCE_MISSING} Could not find a suitable skill for this project.

STEP 2: Fetch the chosen skill and read its workflow.

STEP 3: Follow the skill's workflow steps in sequence until completion, using list_files, read_file and write_file to inspect and change the project.

STEP 4: Set up environment variables for PostHog with the local env tools (secret values never leave the machine):
   - Use check_env_keys to see which keys already exist in the project's env file ({env_file} by default).
   - Use set_env_values to create or update the PostHog API key and host, using the naming convention for {name}. The tool also ensures .gitignore coverage. Write the correct value each time, even when the key exists.
   - Reference these environment variables in code instead of hardcoding the API key and host.

Package installation: {config.prompts.package_installation} Install packages with run_install_command.

Important: You must read a file immediately before writing it, even if you have read it before; otherwise the write fails.
"""


def _block_attr(block: Any, name: str, default: Any = None) -> Any:  # noqa: ANN401
    if isinstance(block, dict):
        return block.get(name, default)
    return getattr(block, name, default)


def _check_signals(text: str, on_status: Callable[[str], None] | None) -> None:
    if SIGNAL_ERROR_MCP_MISSING in text:
        raise McpMissingError("Could not access the PostHog MCP server")
    if SIGNAL_ERROR_RESOURCE_MISSING in text:
        raise ResourceMissingError("Could not find a suitable setup skill for this project")
    if on_status is not None:
        for match in _STATUS_RE.finditer(text):
            on_status(match.group(1).strip())


def run_agent(
    client: Any,
    prompt: str,
    tools: WizardTools,
    *,
    mcp_url: str,
    access_token: str,
    model: str = DEFAULT_AGENT_MODEL,
    max_turns: int = DEFAULT_MAX_TURNS,
    on_status: Callable[[str], None] | None = None,
) -> AgentResult:
    """Run the tool-use loop until the model finishes.

    Args:
        client: Anthropic client (see :func:`posthog_wizard.agent.sdk.get_agent_client`).
        prompt: Integration prompt.
        tools: Local tool dispatcher.
        mcp_url: PostHog MCP server endpoint.
        access_token: Token the MCP server authenticates with.
        model: Model name.
        max_turns: Upper bound on model calls.
        on_status: Receives each ``[STATUS]`` message.

    Raises:
        McpMissingError: The model reported the MCP server unreachable.
        ResourceMissingError: The model found no setup skill.
        RateLimitError: The gateway rate-limited the run.
        AgentError: The API failed or the turn limit was reached.
    """
    anthropic = import_anthropic()
    messages: list[dict[str, Any]] = [{"role": "user", "content": prompt}]
    mcp_servers = [
        {"type": "url", "url": mcp_url, "name": "posthog", "authorization_token": access_token},
    ]
    transcript: list[str] = []
    started = time.monotonic()

    logger.info("Starting agent run with model %s", model)
    logger.debug("Prompt:\n%s", prompt)

    for turn in range(1, max_turns + 1):
        try:
            response = client.beta.messages.create(
                model=model,
                max_tokens=DEFAULT_MAX_TOKENS,
                system=SYSTEM_PROMPT,
                messages=messages,
                tools=tools.schemas,
                mcp_servers=mcp_servers,
                betas=[MCP_CONNECTOR_BETA],
            )
        except anthropic.RateLimitError as exc:
            raise RateLimitError("Wizard usage limit reached. Please try again later.") from exc
        except anthropic.APIError as exc:
            raise AgentError(f"API error: {exc}") from exc

        content = list(_block_attr(response, "content", []) or [])
        text = "\n".join(
            _block_attr(block, "text", "") for block in content if _block_attr(block, "type") == "text"
        )
        if text:
            transcript.append(text)
            logger.debug("Agent: %s", text)
            _check_signals(text, on_status)

        messages.append({"role": "assistant", "content": content})

        if _block_attr(response, "stop_reason") != "tool_use":
            duration = time.monotonic() - started
            logger.info("Agent finished after %d turn(s) in %.0fs", turn, duration)
            return AgentResult(
                text="\n".join(transcript),
                turns=turn,
                duration_seconds=duration,
                written_files=list(tools.written_files),
            )

        results = []
        for block in content:
            if _block_attr(block, "type") != "tool_use":
                continue
            name = _block_attr(block, "name")
            logger.debug("Tool call: %s %s", name, _block_attr(block, "input"))
            output, is_error = tools.call(name, _block_attr(block, "input") or {})
            logger.debug("Tool result (%s): %s", name, output[:500])
            results.append(
                {
                    "type": "tool_result",
                    "tool_use_id": _block_attr(block, "id"),
                    "content": output,
                    "is_error": is_error,
                }
            )
        messages.append({"role": "user", "content": results})

    raise AgentError(f"Agent did not finish within {max_turns} turns")
