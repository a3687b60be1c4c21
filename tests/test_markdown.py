import pytest

from onboarding.tour.markdown import parse_blocks, render


def test_bold_and_italic():
    assert render("**bold** and *italic*") == "<p><strong>bold</strong> and <em>italic</em></p>"


@pytest.mark.parametrize(
    "source,expected",
    [
        ("### Small", "<h3>Small</h3>"),
        ("###### Tiny", "<h6>Tiny</h6>"),
        ("# Big", "<p># Big</p>"),
        ("- a\n- b", "<ul><li>a</li><li>b</li></ul>"),
        ("* a\n* b", "<ul><li>a</li><li>b</li></ul>"),
        ("1. x\n2. y", "<ol><li>x</li><li>y</li></ol>"),
        ("> one\n> two", "<blockquote>one<br>two</blockquote>"),
        ("---", "<hr>"),
        ("line1\nline2\n\npara2", "<p>line1<br>line2</p><p>para2</p>"),
        ("a\r\nb", "<p>a<br>b</p>"),
    ],
)
def test_blocks(source, expected):
    assert render(source) == expected


def test_inline_constructs():
    assert render("`x < y`") == "<p><code>x &lt; y</code></p>"
    assert render("__b__") == "<p><strong>b</strong></p>"
    assert render("**bold _and_ it**") == "<p><strong>bold <em>and</em> it</strong></p>"
    assert render("snake_case_name") == "<p>snake_case_name</p>"
    assert render("_it_") == "<p><em>it</em></p>"


def test_links_open_in_new_tab():
    assert (
        render("[site](https://x.org)")
        == '<p><a href="https://x.org" target="_blank" rel="noopener">site</a></p>'
    )


def test_image_with_title():
    assert render('![logo](https://x.org/l.png "Logo")') == (
        '<p><img src="https://x.org/l.png" alt="logo" title="Logo"'
        ' style="max-width:100%;height:auto;" /></p>'
    )


def test_escaping_leaves_entities_and_tags():
    assert render("a & b < c") == "<p>a &amp; b &lt; c</p>"
    assert render("fish &amp; chips") == "<p>fish &amp; chips</p>"
    assert render("<b>raw</b> text") == "<p><b>raw</b> text</p>"


def test_empty_input():
    assert render("") == ""
    assert render(None) == ""


def test_heading_interrupts_list():
    kinds = [b.kind for b in parse_blocks("- a\n### Head\n- b")]
    assert kinds == ["ul", "heading", "ul"]


def test_sanitize_option_strips_scripts_keeps_image_style():
    assert render("<script>x</script>hi", sanitize=True) == "<p>hi</p>"
    out = render("![a](b.png)", sanitize=True)
    assert 'style="max-width:100%;height:auto;"' in out
