"""
Sample HTML inputs and documents for testing.

This module contains:
- Small HTML snippets for the parser scenarios
- Legacy email-template HTML (layout tables, font tags)
- A mixed page with unrecognized markup for data-loss checks
- A builder for a document holding every block type
"""

from blockdoc.blocks.factory import create_default
from blockdoc.models.blocks import BlockType, HeadingBlock, ParagraphBlock
from blockdoc.models.document import Section
from blockdoc.models.marks import Mark, MarkType, TextSegment

# Heading + paragraph with a placeholder token
WELCOME_HTML = "<h1>Welcome</h1><p>Hello @Name</p>"

# Legacy layout table with two cells
LAYOUT_TABLE_HTML = '<table width="500" cellpadding="4"><tr><td>A</td><td>B</td></tr></table>'

# Data table with a header row
DATA_TABLE_HTML = (
    "<table><thead><tr><th>Name</th></tr></thead>"
    "<tbody><tr><td>John</td></tr></tbody></table>"
)

# Email template built from nested layout tables
EMAIL_TEMPLATE_HTML = """<!DOCTYPE html>
<html>
<head><style>.brand { color: #003366; }</style></head>
<body>
<table role="presentation" width="600" cellpadding="0" cellspacing="0">
  <tr>
    <td><img src="https://cdn.example.com/logo.png" alt="Acme"></td>
  </tr>
  <tr>
    <td>
      <h2 style="font-size: 20px; text-align: center;">Loan Agreement</h2>
      <p style="color: #333333;">Dear <font color="#cc0000">PH@FirstName</font>,</p>
    </td>
  </tr>
  <tr>
    <td style="width: 50%;"><p>Left column text</p></td>
    <td style="width: 50%;"><p>Right column text</p></td>
  </tr>
</table>
</body>
</html>
"""

# Mixed page: known blocks, inline runs and an unknown element
MIXED_CONTENT_HTML = """
<div class="wrapper">
  <h2>Terms</h2>
  <p>The <b>borrower</b> agrees to <a href="https://example.com/repay">repay</a>.</p>
  <custom-widget data-x="1">Widget text</custom-widget>
  <blockquote>Quoted words</blockquote>
  <img src="logo.png" alt="Logo">
  <ul><li>First item</li><li>Second item</li></ul>
  <table>
    <tr><td>Cell one</td><td>Cell two</td></tr>
    <tr><td>Cell three</td><td>Cell four</td></tr>
  </table>
  <span>Loose span</span> trailing text
</div>
"""

# Form markup as produced by typical form builders
FORM_HTML = """
<form>
  <div class="field"><label for="email">Email *</label><input type="email" id="email" name="email"></div>
  <div class="field"><label for="notes">Notes</label><textarea id="notes" name="notes" rows="6"></textarea></div>
  <div class="field">
    <label for="state">State</label>
    <select id="state" name="state">
      <option value="">Select...</option>
      <option value="ca">California</option>
      <option value="ny" selected>New York</option>
    </select>
  </div>
  <fieldset>
    <legend>Plan</legend>
    <label><input type="radio" name="plan" value="basic"> Basic</label>
    <label><input type="radio" name="plan" value="pro"> Pro</label>
  </fieldset>
  <input type="date" name="start_date">
  <input type="hidden" name="token" value="secret">
  <div class="signature"><label>Borrower Signature</label></div>
  <button type="submit">Send</button>
</form>
"""

# Two-column CSS grid
GRID_HTML = """
<div style="display: grid; grid-template-columns: 1fr 1fr;">
  <div><h3>Left</h3></div>
  <div><p>Right</p></div>
</div>
"""

# Markup with script and event handlers
DANGEROUS_HTML = """
<p onclick="steal()">Safe text</p>
<script>alert('x')</script>
<a href="javascript:alert(1)">bad link</a>
"""

# Header table with an image cell
HEADER_TABLE_WITH_IMAGE_HTML = (
    "<table><tr><th>Logo</th><th>Name</th></tr>"
    '<tr><td><img src="logo.png" alt="L"></td><td>Acme</td></tr></table>'
)

# Loose radio group with a leading prompt
PROMPTED_RADIO_HTML = (
    "<div><span>Pick a plan:</span>"
    '<input type="radio" name="p" value="a"> Basic '
    '<input type="radio" name="p" value="b"> Pro</div>'
)

# Fieldset with a help paragraph ahead of its options
FIELDSET_WITH_HELP_HTML = (
    "<fieldset><legend>Plan</legend><p>Choose carefully, this is binding.</p>"
    '<label><input type="radio" name="p"> Monthly</label>'
    '<label><input type="radio" name="p"> Yearly</label></fieldset>'
)

# Shapes whose text and images must all survive import
CONTENT_PRESERVATION_CASES = {
    "header_table_with_image": HEADER_TABLE_WITH_IMAGE_HTML,
    "header_table_with_control": (
        "<table><thead><tr><th>Item</th><th>Agree</th></tr></thead>"
        '<tr><td>Terms</td><td><input type="checkbox" name="agree"> Accepted</td></tr></table>'
    ),
    "prompted_radio": PROMPTED_RADIO_HTML,
    "prompted_checkboxes": (
        "<div><label>Extras</label>"
        '<label><input type="checkbox" name="x"> Insurance</label>'
        '<label><input type="checkbox" name="x"> Warranty</label></div>'
    ),
    "radio_with_stray_note": (
        '<div><input type="radio" name="p"> Basic <span>(recommended)</span>'
        '<input type="radio" name="p"> Premium</div>'
    ),
    "fieldset_with_help": FIELDSET_WITH_HELP_HTML,
    "fieldset_with_image_and_note": (
        '<fieldset><legend>Size</legend><img src="chart.png" alt="Size chart">'
        '<label><input type="radio" name="s"> Small</label>'
        '<label><input type="radio" name="s"> Large</label> Sizes run large.</fieldset>'
    ),
    "fieldset_with_wrapped_note": (
        "<fieldset><legend>Contact</legend>"
        '<div><label><input type="radio" name="c"> Phone</label><em>weekdays only</em></div>'
        '<div><label><input type="radio" name="c"> Email</label></div></fieldset>'
    ),
}


def build_sample_sections() -> list:
    """
    Build a document exercising every block type, styled text and all
    three column layouts.

    Returns:
        List of Section
    """
    heading = HeadingBlock(
        level="h1",
        segments=[
            TextSegment(text="Agreement for ", marks=[]),
            TextSegment(
                text="@Borrower",
                marks=[Mark(type=MarkType.PLACEHOLDER, value="@Borrower")],
            ),
        ],
    )
    paragraph = ParagraphBlock(
        segments=[
            TextSegment(text="Please read ", marks=[]),
            TextSegment(text="carefully", marks=[Mark(type=MarkType.BOLD), Mark(type=MarkType.ITALIC)]),
            TextSegment(text=" and visit ", marks=[]),
            TextSegment(
                text="our site",
                marks=[
                    Mark(type=MarkType.LINK, value="https://example.com/terms?a=1&b=2"),
                    Mark(type=MarkType.TEXT_COLOR, value="#ff0000"),
                ],
            ),
            TextSegment(text=".\nSecond line", marks=[]),
        ],
        text_align="justify",
        color="#333333",
        margin_top=4,
        padding_x=6,
    )

    single = Section(column_count=1, columns=[[heading, paragraph, create_default(BlockType.DIVIDER)]])
    double = Section(
        column_count=2,
        columns=[
            [create_default(BlockType.TEXT_INPUT, required=True), create_default(BlockType.TEXTAREA)],
            [create_default(BlockType.DROPDOWN, default_value="Option 2"), create_default(BlockType.DATE_PICKER)],
        ],
    )
    triple = Section(
        column_count=3,
        columns=[
            [
                create_default(BlockType.RADIO_GROUP, layout="horizontal"),
                create_default(BlockType.CHECKBOX_GROUP),
            ],
            [
                create_default(BlockType.SINGLE_CHECKBOX),
                create_default(BlockType.FILE_UPLOAD, multiple=True),
                create_default(BlockType.SIGNATURE),
            ],
            [
                create_default(BlockType.IMAGE, src="https://cdn.example.com/a.png"),
                create_default(BlockType.BUTTON),
            ],
        ],
    )
    tail = Section(
        column_count=1,
        columns=[
            [
                create_default(BlockType.TABLE),
                create_default(BlockType.LIST, list_type="ordered"),
                create_default(
                    BlockType.RAW_HTML,
                    html_content='<marquee class="promo">Sale <b>now</b></marquee>',
                ),
            ]
        ],
    )
    return [single, double, triple, tail]
