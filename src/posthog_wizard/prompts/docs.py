"""Installation documentation for the templated (non-agent) flow.

Each builder returns plain-text sections of the form::

    ==============================
    FILE: <file name>
    LOCATION: <where it lives>
    ==============================
    Changes:
    - ...

    Example:
    --------------------------------------------------
    <code>
    --------------------------------------------------

The text is passed verbatim to the LLM gateway as reference material.
"""

from __future__ import annotations

from posthog_wizard.constants import get_asset_host_from_host, get_ui_host_from_host

_RULE = "=" * 30
_FENCE = "-" * 50


def doc_section(file: str, location: str, changes: list[str], example: str) -> str:
    """Render one documentation section."""
    lines = [
        _RULE,
        f"FILE: {file}",
        f"LOCATION: {location}",
        _RULE,
        "Changes:",
        *(f"- {change}" for change in changes),
        "",
        "Example:",
        _FENCE,
        example.strip("\n"),
        _FENCE,
    ]
    return "\n".join(lines)


def _ext(language: str, jsx: bool = False) -> str:
    if language == "typescript":
        return "tsx" if jsx else "ts"
    return "jsx" if jsx else "js"


# ---------------------------------------------------------------------------
# Next.js
# ---------------------------------------------------------------------------

_NEXT_INIT_OPTIONS = """      api_host: "/ingest",
      ui_host: "__UI_HOST__",
      defaults: '2025-05-24',
      capture_exceptions: true,
      debug: process.env.NODE_ENV === "development","""

_NEXT_APP_PROVIDER = """"use client"

import posthog from "posthog-js"
import { PostHogProvider as PHProvider } from "posthog-js/react"
import { useEffect } from "react"

export function PostHogProvider({ children }) {
  useEffect(() => {
    posthog.init(process.env.NEXT_PUBLIC_POSTHOG_KEY, {
__INIT__
    })
  }, [])

  return <PHProvider client={posthog}>{children}</PHProvider>
}
"""

_NEXT_APP_LAYOUT = """// other imports
import { PostHogProvider } from "LOCATION_OF_POSTHOG_PROVIDER"

export default function RootLayout({ children }) {
  return (
    <html lang="en">
      <body>
        <PostHogProvider>
          {children}
        </PostHogProvider>
      </body>
    </html>
  )
}
"""

_NEXT_PAGES_APP = """import { useEffect } from "react"
import posthog from "posthog-js"
import { PostHogProvider } from "posthog-js/react"

export default function App({ Component, pageProps }) {
  useEffect(() => {
    posthog.init(process.env.NEXT_PUBLIC_POSTHOG_KEY, {
__INIT__
    })
  }, [])

  return (
    <PostHogProvider client={posthog}>
      <Component {...pageProps} />
    </PostHogProvider>
  )
}
"""

_NEXT_SERVER_CLIENT = """import { PostHog } from "posthog-node"

// Node.js client for sending events from the server side.
export default function PostHogClient() {
  const posthogClient = new PostHog(process.env.NEXT_PUBLIC_POSTHOG_KEY, {
    host: process.env.NEXT_PUBLIC_POSTHOG_HOST,
    flushAt: 1,
    flushInterval: 0,
  })
  return posthogClient
}
"""

_NEXT_CONFIG = """const nextConfig = {
  // other config
  async rewrites() {
    return [
      {
        source: "/ingest/static/:path*",
        destination: "__ASSET_HOST__/static/:path*",
      },
      {
        source: "/ingest/:path*",
        destination: "__HOST__/:path*",
      },
      {
        source: "/ingest/decide",
        destination: "__HOST__/decide",
      },
    ];
  },
  // This is required to support PostHog trailing slash API requests
  skipTrailingSlashRedirect: true,
}
module.exports = nextConfig
"""


def _fill(template: str, host: str) -> str:
    return (
        template.replace("__INIT__", _NEXT_INIT_OPTIONS)
        .replace("__UI_HOST__", get_ui_host_from_host(host))
        .replace("__ASSET_HOST__", get_asset_host_from_host(host))
        .replace("__HOST__", host)
    )


def _next_shared_sections(host: str, language: str) -> list[str]:
    return [
        doc_section(
            f"posthog.{_ext(language)}",
            "Wherever works best given the project structure",
            ["Initialize the PostHog Node.js client"],
            _fill(_NEXT_SERVER_CLIENT, host),
        ),
        doc_section(
            "next.config.{js,ts,mjs,cjs}",
            "Wherever the root next config is",
            [
                "Add rewrites to the Next.js config to support PostHog, if there are "
                "existing rewrites, add the PostHog rewrites to them.",
                "Add skipTrailingSlashRedirect to the Next.js config to support PostHog "
                "trailing slash API requests.",
                "Adapt to the extension the config uses; if it does not exist yet use '.js'.",
            ],
            _fill(_NEXT_CONFIG, host),
        ),
    ]


def get_nextjs_app_router_docs(host: str, language: str) -> str:
    """Documentation for Next.js projects using the App Router."""
    sections = [
        doc_section(
            f"PostHogProvider.{_ext(language, jsx=True)} "
            "(put it somewhere where client files are, like the components folder)",
            "Wherever other providers are, or the components folder",
            [
                "Create a PostHogProvider component that will be imported into the layout file.",
                "Make sure to include the defaults: '2025-05-24' option in the init call.",
            ],
            _fill(_NEXT_APP_PROVIDER, host),
        ),
        doc_section(
            f"layout.{_ext(language, jsx=True)}",
            "Wherever the root layout is",
            ["Import the PostHogProvider from the providers file and wrap the app in it."],
            _NEXT_APP_LAYOUT,
        ),
        *_next_shared_sections(host, language),
    ]
    return "\n\n".join(sections)


def get_nextjs_pages_router_docs(host: str, language: str) -> str:
    """Documentation for Next.js projects using the Pages Router."""
    app_file = f"_app.{_ext(language, jsx=True)}"
    sections = [
        doc_section(
            app_file,
            f"Wherever the root {app_file} file is",
            [
                "Initialize PostHog in _app.js.",
                "Wrap the application in PostHogProvider.",
                "Make sure to include the defaults: '2025-05-24' option in the init call.",
            ],
            _fill(_NEXT_PAGES_APP, host),
        ),
        *_next_shared_sections(host, language),
    ]
    return "\n\n".join(sections)


# ---------------------------------------------------------------------------
# React
# ---------------------------------------------------------------------------

_REACT_ROOT = """import React from 'react';
import ReactDOM from 'react-dom/client';
import App from './App';

import { PostHogProvider } from 'posthog-js/react'

const root = ReactDOM.createRoot(document.getElementById('root'));

root.render(
  <React.StrictMode>
    <PostHogProvider
      apiKey={__KEY__}
      options={{
        api_host: __HOST__,
        defaults: '2025-05-24',
        capture_exceptions: true,
        debug: __DEBUG__,
      }}
    >
      <App />
    </PostHogProvider>
  </React.StrictMode>
);
"""


def get_react_docs(language: str, env_var_prefix: str) -> str:
    """Documentation for plain React apps.

    Args:
        language: ``"typescript"`` or ``"javascript"``.
        env_var_prefix: ``VITE_PUBLIC_``, ``REACT_APP_`` or ``NEXT_PUBLIC_``.
    """
    if env_var_prefix == "VITE_PUBLIC_":
        key = "import.meta.env.VITE_PUBLIC_POSTHOG_KEY"
        host = "import.meta.env.VITE_PUBLIC_POSTHOG_HOST"
        debug = 'import.meta.env.MODE === "development"'
    else:
        key = f"process.env.{env_var_prefix}POSTHOG_KEY"
        host = f"process.env.{env_var_prefix}POSTHOG_HOST"
        debug = 'process.env.NODE_ENV === "development"'

    example = _REACT_ROOT.replace("__KEY__", key).replace("__HOST__", host).replace("__DEBUG__", debug)
    return doc_section(
        f"{{index / App}}.{_ext(language, jsx=True)} (wherever the root of the app is)",
        "Wherever the root of the app is",
        [
            "Add the PostHogProvider to the root of the app in the provider tree.",
            "Make sure to include the defaults: '2025-05-24' option in the init call.",
        ],
        example,
    )


# ---------------------------------------------------------------------------
# Astro
# ---------------------------------------------------------------------------

_ASTRO_COMPONENT = """---
// src/components/posthog.astro
---
<script is:inline type="text/javascript" id="posthog-js">
  !function(t,e){var o,n,p,r;e.__SV||(window.posthog=e,e._i=[],e.init=function(i,s,a){function g(t,e){var o=e.split(".");2==o.length&&(t=t[o[0]],e=o[1]),t[e]=function(){t.push([e].concat(Array.prototype.slice.call(arguments,0)))}}(p=t.createElement("script")).type="text/javascript",p.crossOrigin="anonymous",p.async=!0,p.src=s.api_host+"/static/array.js",(r=t.getElementsByTagName("script")[0]).parentNode.insertBefore(p,r);var u=e;for(void 0!==a?u=e[a]=[]:a="posthog",u.people=u.people||[],o="capture identify alias people.set people.set_once set_config register register_once unregister opt_out_capturing has_opted_out_capturing opt_in_capturing reset isFeatureEnabled onFeatureFlags getFeatureFlag getFeatureFlagPayload reloadFeatureFlags group".split(" "),n=0;n<o.length;n++)g(u,o[n]);e._i.push([i,s,a])},e.__SV=1)}(document,window.posthog||[]);
  posthog.init('__KEY__', { api_host: '__HOST__', defaults: '2025-05-24' });
</script>
"""

_ASTRO_LAYOUT = """---
import PostHog from '../components/posthog.astro';
---
<html>
  <head>
    <PostHog />
  </head>
  <body>
    <slot />
  </body>
</html>
"""

_ASTRO_PAGE = """---
import PostHogLayout from '../layouts/PostHogLayout.astro';
---
<PostHogLayout>
  <!-- existing page content -->
</PostHogLayout>
"""


def get_astro_docs(project_api_key: str, host: str) -> str:
    """Documentation for Astro sites."""
    component = _ASTRO_COMPONENT.replace("__KEY__", project_api_key).replace("__HOST__", host)
    sections = [
        doc_section(
            "src/components/posthog.astro",
            "Components folder (create if missing)",
            ["Add a PostHog loader script with `is:inline`."],
            component,
        ),
        doc_section(
            "src/layouts/PostHogLayout.astro",
            "Layouts folder (create if missing)",
            ["Insert the new `<PostHog />` component in the `<head>`."],
            _ASTRO_LAYOUT,
        ),
        doc_section(
            "any page you want analytics on, e.g. src/pages/index.astro",
            "Your page file",
            ["Wrap content with the new layout."],
            _ASTRO_PAGE,
        ),
    ]
    return "\n\n".join(sections)
