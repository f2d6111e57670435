"""Usage documentation for a proxy URL, as JSON or a small HTML page."""

import html
import json

from endpoint_proxy.config.settings import Settings
from endpoint_proxy.endpoints.models import ApiType, EndpointConfig

EXAMPLE_PROMPT = "Hello, this is a test message."


def describe_proxy(config: EndpointConfig, settings: Settings) -> dict:
    """Machine-readable description of how to call a proxy URL."""
    url = settings.proxy_url_for(config.proxy_id)
    example_body = {"prompt": EXAMPLE_PROMPT}
    curl = (
        f"curl -X POST {url} "
        f"-H 'Content-Type: application/json' "
        f"-d '{json.dumps(example_body)}'"
    )

    if config.api_type == ApiType.CUSTOM.value:
        body_notes = "The whole JSON body is forwarded verbatim to the upstream URL; 'prompt' is still required."
    else:
        body_notes = "Only 'prompt' is used; the upstream request is built for the configured provider."

    return {
        "name": config.name,
        "description": config.description,
        "apiType": config.api_type,
        "status": config.status,
        "method": "POST",
        "url": url,
        "headers": {"Content-Type": "application/json"},
        "body": example_body,
        "bodyNotes": body_notes,
        "response": "The upstream provider's JSON response, relayed unmodified with its status code.",
        "errors": {
            "400": "Missing prompt or endpoint has no API key",
            "403": "Origin not allowed for this endpoint",
            "404": "Unknown proxy URL",
            "500": "Upstream provider unreachable or returned an unreadable response",
        },
        "example": curl,
    }


def prefers_html(accept: str | None) -> bool:
    """True when the Accept header ranks text/html above application/json."""
    if not accept:
        return False

    html_q = json_q = 0.0
    for part in accept.split(","):
        media, _, params = part.strip().partition(";")
        q = 1.0
        for param in params.split(";"):
            key, _, value = param.strip().partition("=")
            if key == "q":
                try:
                    q = float(value)
                except ValueError:
                    q = 0.0
        media = media.strip().lower()
        if media == "text/html":
            html_q = max(html_q, q)
        elif media == "application/json":
            json_q = max(json_q, q)
    return html_q > 0 and html_q > json_q


def render_html(doc: dict) -> str:
    e = html.escape
    errors = "".join(
        f"<li><code>{e(code)}</code> {e(text)}</li>" for code, text in doc["errors"].items()
    )
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{e(doc["name"])} - proxy endpoint</title>
<style>
body {{ font-family: system-ui, sans-serif; max-width: 760px; margin: 2rem auto; padding: 0 1rem; color: #111; }}
pre {{ background: #f4f4f5; padding: 1rem; border-radius: 6px; overflow-x: auto; }}
code {{ background: #f4f4f5; padding: 0 .25rem; border-radius: 3px; }}
</style>
</head>
<body>
<h1>{e(doc["name"])}</h1>
<p>{e(doc["description"])}</p>
<p>Provider: <code>{e(doc["apiType"])}</code> &middot; Status: <code>{e(doc["status"])}</code></p>
<h2>Request</h2>
<p><code>{e(doc["method"])} {e(doc["url"])}</code></p>
<pre>{e(json.dumps(doc["body"], indent=2))}</pre>
<p>{e(doc["bodyNotes"])}</p>
<h2>Example</h2>
<pre>{e(doc["example"])}</pre>
<h2>Response</h2>
<p>{e(doc["response"])}</p>
<ul>{errors}</ul>
</body>
</html>
"""
