from onboarding.tour.html_sanitizer import sanitize_html


def test_sanitize_removes_script_and_on_attributes():
    html = '<div><script>alert(1)</script><a href="javascript:doBad()" onclick="bad()" style="color:red">Link</a></div>'
    out = sanitize_html(html)
    assert "script" not in out
    assert "onclick" not in out
    assert "javascript:doBad" not in out
    assert "style=" not in out


def test_sanitize_keeps_safe_content():
    html = '<p>Safe <strong>text</strong></p><a href="https://example.com" target="_blank">OK</a>'
    out = sanitize_html(html)
    assert "<strong>text</strong>" in out
    assert 'href="https://example.com"' in out


def test_only_the_renderer_image_style_survives():
    out = sanitize_html(
        '<img src="a.png" style="max-width:100%;height:auto;" />'
        '<img src="b.png" style="position:fixed" onerror="x()" />'
    )
    assert out.count("style=") == 1
    assert "onerror" not in out


def test_embedded_frames_and_script_schemes_removed():
    out = sanitize_html('<iframe src="https://x"></iframe><a href=" VBScript:msgbox(1)">x</a>')
    assert "iframe" not in out
    assert "href" not in out
