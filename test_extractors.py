"""
Tests for the structured extractors: tables, description lists, images,
links, iframes, meta tags and the tree dump.
"""

from html_navigator import Node
from html_navigator.extractors import parse_srcset
from html_navigator.text import is_valid_link


# --- Tables ---

def test_parse_tables_fixture(load_html):
    tables = Node(load_html("table")).parse_tables()
    assert tables == [[
        ["Név", "Ár"],
        ["A", "10"],
        ["B", "20"],
    ]]


def test_parse_tables_inline():
    markup = (
        "<table><tr><th>Name</th><th>Price</th></tr>"
        "<tr><td>A</td><td>10</td></tr><tr><td>B</td><td>20</td></tr></table>"
    )
    assert Node(markup).parse_tables() == [[["Name", "Price"], ["A", "10"], ["B", "20"]]]


def test_parse_tables_mixed_cells_and_empty_cells():
    markup = "<table><tr><th>Row</th><td>1</td><th>Mid</th><td></td></tr></table>"
    assert Node(markup).parse_tables() == [[["Row", "1", "Mid", ""]]]


def test_parse_tables_nested_rows_stay_with_their_table():
    markup = (
        "<table><tr><td>outer</td><td>"
        "<table><tr><td>inner</td></tr></table>"
        "</td></tr></table>"
    )
    tables = Node(markup).parse_tables()
    assert len(tables) == 2
    assert len(tables[0]) == 1
    assert tables[1] == [["inner"]]


def test_parse_tables_without_tables():
    assert Node("<div>none</div>").parse_tables() == []
    assert Node().parse_tables() == []


# --- Description lists ---

def test_parse_description_lists(load_html):
    items = [item.model_dump() for item in Node(load_html("dl")).parse_description_lists()]
    assert items == [
        {"name": "Color", "value": "Red"},
        {"name": "Size", "value": "XL"},
        {"name": "", "value": "Orphan value"},
        {"name": "", "value": "No term"},
        {"name": "Weight", "value": "2 kg"},
        {"name": "Dangling term", "value": ""},
    ]


def test_repeated_dt_replaces_open_pair():
    node = Node("<dl><dt>First</dt><dt>Second</dt><dd>Value</dd></dl>")
    items = node.parse_description_lists()
    assert [(item.name, item.value) for item in items] == [("Second", "Value")]


# --- Images ---

def test_parse_images_fixture(load_html):
    images = Node(load_html("image")).parse_images()

    assert len(images) == 4
    assert images[0].src == "/x.jpg"
    assert images[0].title == "Kép 1"
    assert images[0].alt == "Első kép"
    assert (images[0].width, images[0].height) == (300, 200)
    assert images[1].src == "/y.png"
    assert images[1].title == "Kép 2"
    assert images[1].width is None


def test_image_src_fallbacks(load_html):
    images = Node(load_html("image")).parse_images()

    assert images[2].src == "/lazy.jpg"
    assert images[3].src == "/large.jpg"
    assert [c.src for c in images[3].srcset] == ["/small.jpg", "/large.jpg", "/medium.jpg"]


def test_parse_image_on_img_node():
    image = Node('<img src="/a.png" width="100px" height="oops">').parse_image()
    assert image.src == "/a.png"
    assert image.width == 100
    assert image.height is None


def test_parse_image_without_image():
    assert Node("<div>text</div>").parse_image() is None


def test_parse_srcset():
    candidates = parse_srcset(" /a.jpg 1x, /b.jpg 2x ,, /c.jpg")
    assert [(c.src, c.size) for c in candidates] == [("/a.jpg", "1x"), ("/b.jpg", "2x"), ("/c.jpg", "")]
    assert parse_srcset(None) == []


def test_biggest_image(load_html):
    biggest = Node(load_html("image")).get_biggest_image()
    assert biggest.get_attribute("src") == "/x.jpg"


def test_biggest_image_ties_and_missing_dimensions():
    node = Node(
        '<div><img src="/a.jpg" width="10"><img src="/b.jpg" height="10">'
        '<img src="/c.jpg" width="5" height="2"></div>'
    )
    assert node.get_biggest_image().get_attribute("src") == "/a.jpg"
    assert Node("<div></div>").get_biggest_image() is None


# --- Links ---

def test_parse_links(load_html):
    links = [link.model_dump() for link in Node(load_html("links")).parse_links()]
    assert links == [
        {"href": "/relative", "text": "Rel"},
        {"href": "http://example.com/abs", "text": "Abs"},
        {"href": "#", "text": "Hash"},
        {"href": "mailto:test@example.com", "text": "Mail"},
        {"href": "/img/logo.png", "text": "Image"},
        {"href": "", "text": "Space"},
    ]


def test_find_links_filters_invalid_ones(load_html):
    assert Node(load_html("links")).find_links() == ["/relative", "http://example.com/abs"]


def test_is_valid_link_rules():
    accepted = ["/relative", "http://example.com/abs", "https://shop.test/item?id=1"]
    rejected = [
        "",
        "#",
        "mailto:test@example.com",
        "/img/logo.png",
        "/photo.JPEG",
        "/with space",
        "/tab\there",
        "http://example.com",
    ]
    for href in accepted:
        assert is_valid_link(href), href
    for href in rejected:
        assert not is_valid_link(href), href


def test_find_links_honours_configured_extensions(monkeypatch):
    monkeypatch.setenv("HTML_NAVIGATOR_IGNORED_LINK_EXTENSIONS", "pdf")
    node = Node('<div><a href="/doc.pdf">Doc</a><a href="/logo.png">Logo</a></div>')
    assert node.find_links() == ["/logo.png"]


def test_get_link_labels():
    node = Node('<div><a href="/a">Első</a><a href="/b">Második</a><a href="/c"> </a></div>')
    assert node.get_link_labels() == ["Első", "Második"]


# --- Iframes ---

def test_parse_iframes(load_html):
    iframes = Node(load_html("meta")).parse_iframes()
    assert [iframe.src for iframe in iframes] == ["https://www.youtube.com/embed/abc"]


def test_parse_iframes_on_iframe_node():
    iframes = Node('<iframe src="/embed/1"></iframe>').parse_iframes()
    assert [iframe.src for iframe in iframes] == ["/embed/1"]


# --- Meta tags ---

def test_parse_meta(load_html):
    meta = Node(load_html("meta")).parse_meta()
    assert meta == {
        "description": "Meta description",
        "keywords": "keyword-1, keyword-2",
        "og:title": "OG Title",
    }


def test_parse_keywords(load_html):
    assert Node(load_html("meta")).parse_keywords() == ["keyword-1", "keyword-2"]


def test_parse_keywords_without_meta():
    assert Node("<div></div>").parse_keywords() == []


# --- Tree dump ---

def test_to_dict():
    node = Node('<ul class="menu"><li>A</li><!-- skip --><li><a href="/b">B</a></li>\n</ul>')
    assert node.to_dict() == {
        "name": "ul",
        "attributes": {"class": "menu"},
        "children": [
            {"name": "li", "attributes": {}, "children": ["A"]},
            {
                "name": "li",
                "attributes": {},
                "children": [{"name": "a", "attributes": {"href": "/b"}, "children": ["B"]}],
            },
        ],
    }


def test_to_dict_empty_node():
    assert Node().to_dict() is None
