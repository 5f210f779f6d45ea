"""
Tests for NodeList construction policy, access and filtering.
"""

from html_navigator import Node, NodeList, engine


def _list_from(markup: str) -> NodeList:
    tree = engine.parse(markup)
    return NodeList.from_result_set(engine.children_of(tree.getroot()))


def test_result_set_policy():
    """Elements and non-blank text are kept; comments and blank text are not."""
    nodes = _list_from("<div> <p>a</p><!-- note -->tail text\n<p>b</p>\n</div>")

    assert nodes.count() == 3
    assert len(nodes) == 3
    assert [node.get_first_tag_name() for node in nodes] == ["p", None, "p"]
    assert nodes.get_texts() == ["a", "tail text", "b"]


def test_scalars_are_dropped():
    assert NodeList.from_result_set([2.0, True]).is_empty()


def test_text_nodes_keep_special_characters():
    nodes = NodeList.from_result_set(["a < b & c"])
    assert nodes.get_first().get_text() == "a < b & c"


def test_bounds_safe_access():
    nodes = _list_from("<ul><li>1</li><li>2</li><li>3</li></ul>")

    assert nodes.get(1).get_text() == "2"
    assert nodes.get_first().get_text() == "1"
    assert nodes.get_last().get_text() == "3"
    assert nodes.get(3) is None
    assert nodes.get(-1) is None


def test_empty_list():
    nodes = NodeList()
    assert nodes.is_empty()
    assert nodes.count() == 0
    assert nodes.get_first() is None
    assert nodes.get_last() is None
    assert nodes.get_texts() == []
    assert list(nodes) == []


def test_iteration_is_restartable():
    nodes = _list_from("<ul><li>1</li><li>2</li></ul>")
    assert [n.get_text() for n in nodes] == [n.get_text() for n in nodes]


def test_filter_returns_new_list_in_order():
    nodes = _list_from("<ul><li>1</li><li>2</li><li>3</li><li>4</li></ul>")
    even = nodes.filter(lambda node: node.parse_int() % 2 == 0)

    assert even.get_texts() == ["2", "4"]
    assert nodes.count() == 4


def test_filter_by_tag_name():
    tree = engine.parse("<table><tr><th>H</th><td>1</td><td>2</td></tr></table>")
    row = engine.find_by_tag_name(tree, "tr")[0]
    nodes = NodeList.from_result_set(engine.children_of(row))

    assert nodes.filter_by_tag_name("td").get_texts() == ["1", "2"]
    assert nodes.filter_by_tag_name({"td", "th"}).get_texts() == ["H", "1", "2"]
    assert nodes.filter_by_tag_name(name for name in ["th"]).get_texts() == ["H"]


def test_get_texts_skips_blank_and_empty_nodes():
    nodes = NodeList([Node("<p>a</p>"), Node("<p> </p>"), Node()])
    assert nodes.get_texts() == ["a"]


def test_duplicates_are_kept():
    node = Node("<p>x</p>")
    nodes = NodeList()
    nodes.add(node)
    nodes.add(node)
    assert nodes.count() == 2
