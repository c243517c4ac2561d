"""Analytics providers the migration wizard can replace."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable


@dataclass(frozen=True)
class MigrationProvider:
    """A third-party analytics SDK and how to replace it.

    Attributes:
        id: Value accepted by ``migrate --from``.
        name: Display name.
        packages: npm packages that belong to the provider.
        docs_url: Manual migration guide.
        package_map: Provider package to PostHog package.
        build_docs: Maps ``(language, env_var_prefix, framework)`` to the
            migration guide sent to the gateway.
        default_changes: Outro bullets describing the migration.
        next_steps: Outro bullets for the user.
    """

    id: str
    name: str
    packages: tuple[str, ...]
    docs_url: str
    package_map: dict[str, str]
    build_docs: Callable[[str, str, str], str]
    default_changes: tuple[str, ...]
    next_steps: tuple[str, ...]

    def get_posthog_equivalent(self, package: str) -> str | None:
        return self.package_map.get(package)


def _env_reference(env_var_prefix: str, name: str) -> str:
    if env_var_prefix == "VITE_PUBLIC_":
        return f"import.meta.env.VITE_PUBLIC_{name}"
    return f"process.env.{env_var_prefix}{name}"


_REACT_SECTION = """
REACT-SPECIFIC MIGRATION
==============================

Initialize PostHog once, before rendering, and wrap the app in the provider:
--------------------------------------------------
import posthog from 'posthog-js';
import {{ PostHogProvider }} from 'posthog-js/react';

posthog.init({key}, {{
  api_host: {host},
  defaults: '2025-05-24',
  capture_exceptions: true,
}});

function App() {{
  return (
    <PostHogProvider client={{posthog}}>
      <MyApp />
    </PostHogProvider>
  );
}}
--------------------------------------------------

Inside components, use the hook instead of importing posthog directly:
--------------------------------------------------
import {{ usePostHog }} from 'posthog-js/react';

const posthog = usePostHog();
posthog.capture('button_clicked', {{ button: 'signup' }});
--------------------------------------------------
"""


def _amplitude_docs(language: str, env_var_prefix: str, framework: str) -> str:
    key = _env_reference(env_var_prefix, "POSTHOG_KEY")
    host = _env_reference(env_var_prefix, "POSTHOG_HOST")
    react = _REACT_SECTION.format(key=key, host=host) if framework in ("react", "nextjs") else ""
    return f"""
==============================
AMPLITUDE TO POSTHOG MIGRATION GUIDE
==============================

Project language: {language}

This is a migration from Amplitude Analytics to PostHog. You need to:
1. Replace all Amplitude imports with PostHog imports
2. Replace Amplitude initialization with PostHog initialization
3. Replace all Amplitude tracking calls with PostHog equivalents
4. Remove any 'ampli' directory or generated Amplitude SDK wrapper

IMPORTS
--------------------------------------------------
BEFORE: import * as amplitude from '@amplitude/analytics-browser';
        import amplitude from 'amplitude-js';
        import {{ ampli }} from './ampli';
AFTER:  import posthog from 'posthog-js';
--------------------------------------------------

INITIALIZATION
--------------------------------------------------
BEFORE: init('AMPLITUDE_API_KEY');
        amplitude.getInstance().init('AMPLITUDE_API_KEY');
        ampli.load({{ client: {{ apiKey: 'AMPLITUDE_API_KEY' }} }});
AFTER:  posthog.init({key}, {{
          api_host: {host},
          defaults: '2025-05-24',
          capture_exceptions: true,
        }});
--------------------------------------------------

EVENTS
--------------------------------------------------
BEFORE: track('Button Clicked', {{ buttonName: 'signup' }});
        amplitude.getInstance().logEvent('Button Clicked', {{ buttonName: 'signup' }});
        ampli.buttonClicked({{ buttonName: 'signup' }});
AFTER:  posthog.capture('Button Clicked', {{ buttonName: 'signup' }});
--------------------------------------------------

IDENTIFICATION
--------------------------------------------------
BEFORE: setUserId('user-123'); identify(new Identify().set('email', 'user@example.com'));
        ampli.identify('user-123', {{ email: 'user@example.com' }});
AFTER:  posthog.identify('user-123', {{ email: 'user@example.com' }});
--------------------------------------------------

RESET / LOGOUT
--------------------------------------------------
BEFORE: reset(); amplitude.getInstance().setUserId(null);
AFTER:  posthog.reset();
--------------------------------------------------

GROUPS
--------------------------------------------------
BEFORE: setGroup('company', 'company-123');
AFTER:  posthog.group('company', 'company-123', {{ name: 'Acme Inc' }});
--------------------------------------------------

REVENUE
--------------------------------------------------
BEFORE: revenue(new Revenue().setProductId('product-123').setPrice(9.99).setQuantity(1));
AFTER:  posthog.capture('purchase', {{ $set: {{ total_revenue: 9.99 }}, product_id: 'product-123', price: 9.99, quantity: 1 }});
--------------------------------------------------

USER PROPERTIES, OPT-OUT, DEVICE ID
--------------------------------------------------
BEFORE: amplitude.getInstance().setUserProperties({{ plan: 'premium' }});
AFTER:  posthog.capture('$set', {{ $set: {{ plan: 'premium' }} }});
BEFORE: amplitude.getInstance().setOptOut(true);
AFTER:  posthog.opt_out_capturing();
BEFORE: amplitude.getInstance().getDeviceId();
AFTER:  posthog.get_distinct_id();
--------------------------------------------------
{react}
==============================
IMPORTANT MIGRATION NOTES
==============================

1. PostHog uses 'distinct_id' instead of Amplitude's 'user_id' and 'device_id' combination.
2. PostHog captures page views and clicks by default (autocapture).
3. Feature flags in PostHog use isFeatureEnabled() instead of Amplitude's experiments API.
"""


AMPLITUDE = MigrationProvider(
    id="amplitude",
    name="Amplitude",
    packages=(
        "@amplitude/analytics-browser",
        "@amplitude/analytics-node",
        "@amplitude/analytics-react-native",
        "amplitude-js",
    ),
    docs_url="https://posthog.com/docs/migrate/migrate-from-amplitude",
    package_map={
        "@amplitude/analytics-browser": "posthog-js",
        "amplitude-js": "posthog-js",
        "@amplitude/analytics-node": "posthog-node",
        "@amplitude/analytics-react-native": "posthog-react-native",
    },
    build_docs=_amplitude_docs,
    default_changes=(
        "Replaced Amplitude SDK with PostHog SDK",
        "Migrated event tracking calls from Amplitude to PostHog",
        "Migrated user identification from Amplitude to PostHog",
        "Updated initialization code",
        "Removed Amplitude packages",
    ),
    next_steps=(
        "Remove any remaining Amplitude environment variables",
        "Delete the 'ampli' directory if it exists (generated Amplitude SDK)",
        "Verify all events are being captured correctly in PostHog",
        "Set up feature flags and experiments in PostHog if previously using Amplitude experiments",
    ),
)

MIGRATION_PROVIDERS: dict[str, MigrationProvider] = {AMPLITUDE.id: AMPLITUDE}


def get_migration_provider(provider_id: str) -> MigrationProvider | None:
    return MIGRATION_PROVIDERS.get(provider_id)


def get_available_migration_providers() -> list[str]:
    return list(MIGRATION_PROVIDERS)
