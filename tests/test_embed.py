from __future__ import annotations

import io
import zipfile

from codcalc.embed import PLUGIN_SHORTCODE, build_wordpress_plugin_zip, generate_widget_code


def test_widget_code_is_lazy_full_width_iframe():
    code = generate_widget_code("https://calc.example.com/app")

    assert code.startswith("<!-- COD Profit Calculator Embed -->")
    assert 'src="https://calc.example.com/app"' in code
    assert 'width="100%"' in code
    assert 'height="900"' in code
    assert 'loading="lazy"' in code
    assert 'title="COD Profit Calculator"' in code


def test_widget_code_escapes_url_and_floors_height():
    code = generate_widget_code('https://x.test/?a=1&b="2"', height=50)

    assert "&amp;" in code
    assert "&quot;2&quot;" in code
    assert 'height="300"' in code


def test_wordpress_plugin_zip_contains_shortcode():
    payload = build_wordpress_plugin_zip("https://calc.example.com", height=1100)

    with zipfile.ZipFile(io.BytesIO(payload)) as zf:
        names = set(zf.namelist())
        assert names == {"cod-profit-calculator/cod-profit-calculator.php", "cod-profit-calculator/readme.txt"}
        php = zf.read("cod-profit-calculator/cod-profit-calculator.php").decode("utf-8")

    assert php.startswith("<?php")
    assert f"add_shortcode( '{PLUGIN_SHORTCODE}'" in php
    assert "esc_url('https://calc.example.com')" in php
    assert "'height' => '1100'" in php
