"""
Markdown tests for Bebop
Transpiling documents to Bebop source and rendering them to HTML
"""

import pytest
from markdown_lisp import inline_to_lisp, markdown_to_lisp, quote, render_markdown
from parsing import parse


class TestInline:
  """Inline constructs inside one line"""

  def test_plain_text(self):
    assert inline_to_lisp("just words") == '"just words"'

  def test_bold_and_italic(self):
    assert inline_to_lisp("Hello **world**") == '"Hello " (b "world")'
    assert inline_to_lisp("an *aside* here") == '"an " (i "aside") " here"'

  def test_inline_code(self):
    assert inline_to_lisp("run `ls -l` now") == '"run " (code "ls -l") " now"'

  def test_link_and_image(self):
    assert inline_to_lisp("[home](/index.html)") == '(a "/index.html" "home")'
    assert inline_to_lisp("![cat](/cat.png)") == '(img "/cat.png" "cat")'

  def test_embedded_source_is_verbatim(self):
    assert inline_to_lisp('total: |(echo (+ 1 2))|') == '"total: " (echo (+ 1 2))'

  def test_unmatched_markers_are_plain_text(self):
    assert inline_to_lisp("a * b") == '"a * b"'
    assert inline_to_lisp("wow! [x] `y") == '"wow! [x] `y"'

  def test_double_quotes_are_escaped(self):
    assert inline_to_lisp('say "hi"') == '"say &quot;hi&quot;"'
    assert quote('"') == '"&quot;"'

  def test_empty_text(self):
    assert inline_to_lisp("") == '""'


class TestBlocks:
  """Block constructs, one top-level form each"""

  def test_headings(self):
    assert markdown_to_lisp("# Title") == '(h1 (concat "Title"))\n'
    assert markdown_to_lisp("### Sub *it*") == '(h3 (concat "Sub " (i "it")))\n'

  def test_seven_hashes_is_a_paragraph(self):
    assert markdown_to_lisp("####### no") == '(p (concat "####### no"))\n'

  def test_unordered_list(self):
    assert markdown_to_lisp("- a\n- b") == '(ul (concat (li (concat "a")) (li (concat "b"))))\n'

  def test_ordered_list(self):
    assert markdown_to_lisp("1. x\n2. y\n") == '(ol (concat (li (concat "x")) (li (concat "y"))))\n'

  def test_code_block(self):
    source = '```python\nx = "1"\n```'
    assert markdown_to_lisp(source) == '(pre (code "x = &quot;1&quot;\n"))\n'

  def test_unclosed_code_block_falls_back_to_paragraph(self):
    assert markdown_to_lisp("```\ncode") == '(p (concat "```"))\n(p (concat "code"))\n'

  def test_empty_line_is_rule(self):
    assert markdown_to_lisp("a\n\nb") == '(p (concat "a"))\nhr\n(p (concat "b"))\n'

  def test_embedded_block(self):
    source = '|(def [x] 1)|\ntext'
    assert markdown_to_lisp(source) == '(def [x] 1)\n(p (concat "text"))\n'

  def test_multiline_embedded_block(self):
    source = '|\n(def [x] 1)\n(def [y] 2)\n|\nafter'
    lisp_source = markdown_to_lisp(source)
    assert lisp_source.endswith('(p (concat "after"))\n')
    assert len(parse(lisp_source).cells) == 3

  def test_unclosed_embedded_block_is_plain_text(self):
    assert markdown_to_lisp("|open") == '(p (concat "|open"))\n'

  def test_output_always_parses(self):
    document = "# A\n\n- *b*\n- [c](d)\n\n1. `e`\n```\nf\n```\nplain \"g\" **h"
    parse(markdown_to_lisp(document))


class TestRender:
  """Whole documents evaluated against the prelude"""

  def test_simple_document(self):
    html = render_markdown("# Hi\n\nSome *text*")
    assert html == "<h1>Hi</h1><hr/><p>Some <i>text</i></p>"

  def test_lists_and_links(self):
    html = render_markdown("- [home](/)\n- ![logo](/l.png)")
    assert html == "<ul><li><a href='/'>home</a></li><li><img src='/l.png' alt='logo' /></li></ul>"

  def test_code_block(self):
    assert render_markdown("```\nx\n```") == "<pre><code>x\n</code></pre>"

  def test_embedded_definitions_are_usable(self):
    document = '|(def [name] "Bebop")|\n# Hello |name|'
    assert render_markdown(document) == "<h1>Hello Bebop</h1>"

  def test_embedded_function(self):
    document = '|\n(fun [shout x] [concat x "!"])\n|\n|(shout "hey")|'
    assert render_markdown(document) == "hey!"

  def test_reuses_given_environment(self, prelude_env):
    render_markdown('|(def [seen] 1)|', prelude_env)
    assert prelude_env.get("seen") is not None

  def test_empty_document(self):
    assert render_markdown("") == ""
