# -*- coding: utf-8 -*-
"""
Rendering of the `GraphQL Playground
<https://github.com/prisma-labs/graphql-playground>`_ explorer page.
"""

import html
import json
from typing import Any, Dict, Optional


DEFAULT_PLAYGROUND_VERSION = "1.7.2"

CDN_URL = "//cdn.jsdelivr.net/npm/@apollographql/graphql-playground-react@%s"

_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8" />
  <meta name="viewport"
    content="width=device-width, initial-scale=1.0, user-scalable=no">
  <title>GraphQL Playground</title>
  <link rel="stylesheet" href="{cdn}/build/static/css/index.css" />
  <link rel="shortcut icon" href="{cdn}/build/favicon.png" />
  <script src="{cdn}/build/static/js/middleware.js"></script>
</head>
<body>
  <div id="root"></div>
  <script>
    window.addEventListener("load", function (event) {{
      var root = document.getElementById("root");
      root.classList.add("playgroundIn");
      GraphQLPlayground.init(root, {options});
    }});
  </script>
</body>
</html>
"""


def render_playground_page(
    endpoint: str,
    subscription_endpoint: Optional[str] = None,
    version: str = DEFAULT_PLAYGROUND_VERSION,
    **settings: Any
) -> str:
    """
    Render the HTML page loading GraphQL Playground.

    Args:
        endpoint: Path or url of the GraphQL endpoint.
        subscription_endpoint: Path or url of the subscriptions endpoint.
        version: Version of the playground package to load from the CDN.
        **settings: Extra options merged into the playground configuration,
            e.g. ``settings={"editor.theme": "light"}``.

    Returns:
        HTML document.
    """
    options = {"endpoint": endpoint}  # type: Dict[str, Any]
    if subscription_endpoint is not None:
        options["subscriptionEndpoint"] = subscription_endpoint
    options.update(settings)

    return _TEMPLATE.format(
        cdn=html.escape(CDN_URL % version, quote=True),
        # Prevent closing the script tag from inside a JSON string.
        options=json.dumps(options).replace("</", "<\\/"),
    )
