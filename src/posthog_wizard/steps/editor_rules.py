"""Cursor rules that keep follow-up AI edits consistent with the PostHog setup.

The rules are only offered inside Cursor, detected through the
``CURSOR_TRACE_ID`` variable Cursor sets in its integrated terminal.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Mapping

from rich.markup import escape

from posthog_wizard.analytics import Analytics, analytics as default_analytics
from posthog_wizard.ui import WizardUI

logger = logging.getLogger(__name__)

CURSOR_ENV_VAR = "CURSOR_TRACE_ID"
RULES_DIR = Path(".cursor") / "rules"
RULES_FILENAME = "posthog-integration.mdc"

UNIVERSAL_RULES = """\
- Never hardcode the PostHog project API key or host. Read them from the
  environment variables the wizard added to your env file.
- Use the existing PostHog client instance; do not initialize PostHog twice.
- Feature flag keys and event names are shared with the PostHog project.
  Reuse existing names and keep new ones lowercase with spaces or underscores.
- Call `identify` once a user is known and `reset` when they log out.
- Do not capture passwords, tokens or other secrets as event properties."""

_REACT_RULES = """\
---
description: PostHog integration in a React app
globs: "**/*.js,**/*.jsx,**/*.ts,**/*.tsx"
alwaysApply: true
---

# PostHog in React

- PostHog is initialized once by `PostHogProvider` at the root of the app.
- Use the `usePostHog` hook to capture events inside components.
- Use `useFeatureFlagEnabled` or `useFeatureFlagVariantKey` to read flags.

{universal}
"""

_NEXTJS_RULES = """\
---
description: PostHog integration in a Next.js app
globs: "**/*.js,**/*.jsx,**/*.ts,**/*.tsx"
alwaysApply: true
---

# PostHog in Next.js

- Client components use `posthog-js` through the PostHog provider.
- Server code (route handlers, server actions, middleware) uses the
  `posthog-node` client and must call `shutdown` or `flush` when done.
- Requests to PostHog go through the `/ingest` reverse proxy; keep it.

{universal}
"""

_ASTRO_RULES = """\
---
description: PostHog integration in an Astro site
globs: "**/*.astro,**/*.js,**/*.ts"
alwaysApply: true
---

# PostHog in Astro

- The PostHog snippet lives in the `posthog.astro` component included by
  the shared layout. New pages should use that layout.
- Use `window.posthog` in client-side scripts only.

{universal}
"""

RULES: dict[str, str] = {
    "react": _REACT_RULES,
    "nextjs": _NEXTJS_RULES,
    "astro": _ASTRO_RULES,
}


def build_editor_rules(rules_name: str) -> str:
    """Return the rules document for ``rules_name`` with the shared rules inlined.

    Raises:
        KeyError: If there are no rules with that name.
    """
    return RULES[rules_name].replace("{universal}", UNIVERSAL_RULES)


def add_editor_rules_step(
    install_dir: Path,
    rules_name: str,
    integration: str,
    ui: WizardUI,
    analytics: Analytics = default_analytics,
    environ: Mapping[str, str] | None = None,
) -> bool:
    """Offer to write PostHog rules to ``.cursor/rules`` when running in Cursor.

    Returns:
        True when the rules file was written.
    """
    env = os.environ if environ is None else environ
    if not env.get(CURSOR_ENV_VAR):
        return False

    wanted = ui.select(
        "Would you like to have PostHog added to your Cursor rules?",
        [(True, "Yes, please!"), (False, "No, thanks")],
    )
    if not wanted:
        return False

    rules_dir = Path(install_dir) / RULES_DIR
    rules_dir.mkdir(parents=True, exist_ok=True)
    (rules_dir / RULES_FILENAME).write_text(build_editor_rules(rules_name), encoding="utf-8")
    logger.info("Wrote %s", rules_dir / RULES_FILENAME)

    analytics.capture_interaction("added editor rules", integration=integration)
    ui.info(f"Added Cursor rules to {escape(str(rules_dir))}")
    return True
