# -*- coding: utf-8 -*-
"""
wid3py.export
=============

Read-only renderings of a fitted tree:

* :func:`export_text` - indented ``attr = value`` listing,
* :func:`to_graphviz` / :func:`export_graphviz` - DOT description,
* :func:`export_source` - the tree as a self-contained Python decision
  procedure,
* :func:`export_rules` - one ``antecedent => class`` rule per leaf.

None of these functions touch the tree; rendering the same tree twice gives
identical output.
"""
from __future__ import annotations


def _label(class_attribute, node) -> str:
    if node.class_index is None:
        return "null"
    return str(class_attribute.value(node.class_index))


def _one_line(text) -> str:
    return " ".join(str(text).splitlines())


# -----------------------------------------------------------------------------
# Text
# -----------------------------------------------------------------------------
def export_text(tree, class_attribute) -> str:
    """
    Render the tree as indented text.

    Each internal node contributes one ``<attribute> = <value>`` line per
    domain value, prefixed with ``"|  "`` per level of depth and followed by
    the rendering of the matching child.  A leaf renders as ``": <class>"``
    (``": null"`` when it was built from no instances).
    """
    out: list[str] = []
    _text_node(tree, 0, class_attribute, out)
    return "".join(out)


def _text_node(node, level: int, class_attribute, out: list) -> None:
    if node.is_leaf:
        out.append(": " + _label(class_attribute, node))
        return
    att = node.attribute
    for j, v in enumerate(att.values):
        out.append("\n" + "|  " * level + f"{att.name} = {v}")
        _text_node(node.children[j], level + 1, class_attribute, out)


# -----------------------------------------------------------------------------
# Graphviz
# -----------------------------------------------------------------------------
def to_graphviz(tree, class_attribute):
    """
    Build a :class:`graphviz.Digraph` of the tree.

    Nodes are named ``N<node_id>`` after the identifiers assigned during
    construction.  Leaves are filled boxes labelled with their class,
    internal nodes carry their attribute name, and every edge is labelled
    with the attribute value selecting the child.

    Raises
    ------
    RuntimeError
        If the ``graphviz`` package is not installed.
    """
    try:
        import graphviz
    except ImportError:
        raise RuntimeError("Graphviz is required for graph export but not installed.")
    dot = graphviz.Digraph(name="ID3Tree")
    _graph_node(dot, tree, class_attribute)
    return dot


def _graph_node(dot, node, class_attribute) -> None:
    name = f"N{node.node_id}"
    if node.is_leaf:
        dot.node(name, _label(class_attribute, node), shape="box", style="filled")
        return
    att = node.attribute
    dot.node(name, att.name)
    for j, v in enumerate(att.values):
        child = node.children[j]
        dot.edge(name, f"N{child.node_id}", label=f"= {v}")
        _graph_node(dot, child, class_attribute)


def export_graphviz(tree, class_attribute) -> str:
    """DOT source of :func:`to_graphviz`."""
    return to_graphviz(tree, class_attribute).source


# -----------------------------------------------------------------------------
# Python source
# -----------------------------------------------------------------------------
_SOURCE_HEADER = '''\
# Decision procedure generated by wid3py.
# classify(i) takes the attribute values in training column order and
# returns the index of the predicted class (None where no training data
# reached the leaf).


def _check_missing(i, index):
    if i[index] is None or i[index] != i[index]:
        raise ValueError("Null values are not allowed!")


def {function_name}(i):
    return node0(i)
'''


def export_source(tree, class_attribute, function_name: str = "classify") -> str:
    """
    Render the tree as Python source code.

    Every node becomes a function ``node<k>(i)``, ``k`` being a pre-order
    number independent of the node identifiers.  Leaves return their class
    index.  Internal nodes first guard against a missing value, then compare
    the attribute value with each domain value in order and delegate to the
    matching child; a value outside the domain raises ``ValueError``.

    Parameters
    ----------
    tree : Leaf or Internal
        Root of a fitted tree.
    class_attribute : Attribute
        Class attribute, used for the comments naming each leaf's class.
    function_name : str, default="classify"
        Name of the entry point.
    """
    if not function_name.isidentifier() or function_name.startswith("node"):
        raise ValueError(f"invalid function name {function_name!r}")
    lines = _SOURCE_HEADER.format(function_name=function_name).splitlines()
    _source_node(tree, 0, lines, class_attribute)
    return "\n".join(lines) + "\n"


def _source_node(node, num: int, out: list, class_attribute) -> int:
    """Append ``node<num>`` and its subtree; return the last number used."""
    out.append("")
    out.append("")
    out.append(f"def node{num}(i):")
    if node.is_leaf:
        if node.class_index is None:
            out.append("    return None")
        else:
            label = _one_line(class_attribute.value(node.class_index))
            out.append(f"    return {node.class_index}  # {label}")
        return num

    att = node.attribute
    col = att.index
    out.append(f"    _check_missing(i, {col})")
    out.append(f"    # {_one_line(att.name)}")
    subtrees = []
    last = num
    for j, v in enumerate(att.values):
        last += 1
        keyword = "if" if j == 0 else "elif"
        out.append(f"    {keyword} i[{col}] == {v!r}:")
        out.append(f"        return node{last}(i)")
        sub: list[str] = []
        last = _source_node(node.children[j], last, sub, class_attribute)
        subtrees.append(sub)
    out.append("    else:")
    out.append(f"        raise ValueError(\"Value '%s' is not allowed!\" % (i[{col}],))")
    for sub in subtrees:
        out.extend(sub)
    return last


# -----------------------------------------------------------------------------
# Rules
# -----------------------------------------------------------------------------
def export_rules(tree, class_attribute) -> list[str]:
    """One ``cond AND cond => class`` string per leaf, in pre-order."""
    rules: list[str] = []
    _collect_rules(tree, [], rules, class_attribute)
    return rules


def _collect_rules(node, parts, rules, class_attribute) -> None:
    if node.is_leaf:
        body = " AND ".join(parts) if parts else "<root>"
        rules.append(f"{body} => {_label(class_attribute, node)}")
        return
    att = node.attribute
    for j, v in enumerate(att.values):
        _collect_rules(node.children[j], parts + [f"{att.name} = {v}"], rules, class_attribute)
