"""Copy-paste embed snippets for hosting the calculator on third-party sites."""

from __future__ import annotations

import html
import io
import zipfile


WIDGET_TITLE = "COD Profit Calculator"
PLUGIN_SLUG = "cod-profit-calculator"
PLUGIN_SHORTCODE = "cod_profit_calculator"


def generate_widget_code(app_url: str, height: int = 900) -> str:
    """Return an iframe tag pointing at the hosted calculator."""
    src = html.escape(str(app_url).strip(), quote=True)
    return (
        "<!-- COD Profit Calculator Embed -->\n"
        "<iframe\n"
        f'  src="{src}"\n'
        '  width="100%"\n'
        f'  height="{max(int(height), 300)}"\n'
        '  style="border: none; border-radius: 12px; box-shadow: 0 4px 6px -1px rgb(0 0 0 / 0.1); '
        'background-color: transparent;"\n'
        f'  title="{WIDGET_TITLE}"\n'
        '  loading="lazy"\n'
        "></iframe>"
    )


def _plugin_php(app_url: str, height: int) -> str:
    src = str(app_url).strip().replace("'", "\\'")
    return f"""<?php
/**
 * Plugin Name: {WIDGET_TITLE}
 * Description: Embeds the hosted COD profit calculator. Use the shortcode [{PLUGIN_SHORTCODE}].
 * Version: 1.0.0
 */

function cpc_shortcode($atts) {{
    $a = shortcode_atts( array(
        'max_width' => '100%',
        'height' => '{int(height)}',
    ), $atts );

    $style = 'max-width: ' . esc_attr($a['max_width']) . '; width: 100%; margin-left: auto; margin-right: auto;';
    return '<div style="' . $style . '"><iframe src="' . esc_url('{src}') . '" width="100%" height="'
        . esc_attr($a['height']) . '" style="border: none;" title="{WIDGET_TITLE}" loading="lazy"></iframe></div>';
}}
add_shortcode( '{PLUGIN_SHORTCODE}', 'cpc_shortcode' );
"""


def build_wordpress_plugin_zip(app_url: str, height: int = 900) -> bytes:
    """Zip archive of a minimal WordPress plugin exposing the calculator as a shortcode."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        zf.writestr(f"{PLUGIN_SLUG}/{PLUGIN_SLUG}.php", _plugin_php(app_url, max(int(height), 300)))
        zf.writestr(
            f"{PLUGIN_SLUG}/readme.txt",
            f"=== {WIDGET_TITLE} ===\nAdd [{PLUGIN_SHORTCODE}] to any page or post.\n",
        )
    return buffer.getvalue()
