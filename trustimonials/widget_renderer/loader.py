from __future__ import annotations

import json
from typing import Optional

from trustimonials.widget_renderer.pages import RESIZE_MESSAGE_TYPE

NOT_FOUND_SCRIPT = "// Widget not found"
ERROR_SCRIPT = "// Error loading widget configuration"


def container_id(widget_type: str, widget_id: str) -> str:
    return f"trustimonials-{widget_type}-{widget_id}"


def render_loader_script(*, widget_id: str, widget_type: str, base_url: str) -> str:
    """Bootstrap pasted into host pages: finds the container and injects the widget iframe."""
    return f"""(function() {{
  var widgetId = {json.dumps(str(widget_id))};
  var widgetType = {json.dumps(str(widget_type))};
  var containerId = 'trustimonials-' + widgetType + '-' + widgetId;
  var container = document.getElementById(containerId);

  if (!container) {{
    console.error('Trustimonials widget container not found: ' + containerId);
    return;
  }}

  var iframe = document.createElement('iframe');
  iframe.src = {json.dumps(base_url.rstrip("/"))} + '/embed/' + widgetType + '/' + widgetId;
  iframe.width = '100%';
  iframe.height = '400';
  iframe.frameBorder = '0';
  iframe.loading = 'lazy';
  iframe.style.border = 'none';

  container.appendChild(iframe);

  window.addEventListener('message', function(event) {{
    var data = event.data || {{}};
    if (data.type === '{RESIZE_MESSAGE_TYPE}' && data.widgetId === widgetId) {{
      iframe.height = data.height + 'px';
    }}
  }});
}})();
"""


def resolve_base_url(request_base_url: str, configured: Optional[str] = None) -> str:
    """Configured public origin if set, else the origin the request came in on."""
    return (configured or request_base_url).rstrip("/")
