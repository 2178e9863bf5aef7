"""Stylesheets embedded in composed documents."""

from pagepress.models import RequestType

BASE_CSS = """
* { margin: 0; padding: 0; box-sizing: border-box; }
body {
  font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', 'Roboto', 'Helvetica', 'Arial', sans-serif;
  font-size: 14px;
  line-height: 1.6;
  color: #37352f;
}
a { color: #0066cc; text-decoration: underline; }
"""

LETTERHEAD_CSS = """
.letterhead { margin-bottom: 2em; }
.letterhead-content { display: flex; align-items: flex-start; gap: 1em; }
.letterhead-logo { max-width: 120px; max-height: 80px; object-fit: contain; }
.letterhead-info { flex: 1; }
.company-name { font-size: 1.5em; font-weight: 700; color: #1a1a1a; margin-bottom: 0.3em; }
.contact-line { font-size: 0.9em; color: #6b6b6b; margin: 0.2em 0; }
.letterhead-divider { border-top: 2px solid #e0e0e0; margin-top: 1em; }
.page-title { font-size: 2.5em; font-weight: 700; margin: 0.5em 0 1em 0; color: #1a1a1a; }
.properties-section {
  background: #f9f9f9;
  border: 1px solid #e9e9e7;
  border-radius: 4px;
  padding: 1em;
  margin: 1.5em 0;
}
.property-row { display: flex; margin: 0.4em 0; font-size: 0.9em; }
.property-label { font-weight: 600; color: #6b6b6b; min-width: 140px; }
.property-value { color: #37352f; }
.column-chip { display: inline-block; margin-right: 1em; font-size: 0.9em; }
.column-chip small { color: #9b9a97; margin-left: 0.3em; }
"""

BLOCK_CSS = """
h1 { font-size: 2em; font-weight: 700; margin: 1em 0 0.5em 0; line-height: 1.2; }
h2 { font-size: 1.5em; font-weight: 600; margin: 0.8em 0 0.4em 0; line-height: 1.3; }
h3 { font-size: 1.25em; font-weight: 600; margin: 0.6em 0 0.3em 0; line-height: 1.4; }
p { margin: 0.5em 0; }
ul, ol { margin: 0.5em 0; padding-left: 1.5em; }
li { margin: 0.25em 0; }
code {
  background: #f3f3f1;
  color: #eb5757;
  padding: 2px 4px;
  border-radius: 3px;
  font-family: 'SF Mono', Monaco, 'Cascadia Code', 'Roboto Mono', Consolas, 'Courier New', monospace;
  font-size: 0.9em;
}
pre { background: #f7f6f3; border: 1px solid #e9e9e7; border-radius: 3px; padding: 1em; margin: 0.5em 0; white-space: pre-wrap; }
pre code { background: transparent; color: inherit; padding: 0; }
blockquote { border-left: 3px solid #d3d3d3; padding-left: 1em; margin: 0.5em 0; color: #6b6b6b; }
hr { border: none; border-top: 1px solid #e9e9e7; margin: 1.5em 0; }
details { margin: 0.5em 0; }
.callout { display: flex; background: #f7f6f3; border: 1px solid #e9e9e7; border-radius: 3px; padding: 1em; margin: 0.5em 0; }
.callout-icon { font-size: 1.2em; margin-right: 0.5em; }
.todo { margin: 0.25em 0; }
.todo-box { margin-right: 0.5em; }
.todo.checked { color: #9b9a97; text-decoration: line-through; }
"""

TABLE_CSS = """
.database-table { width: 100%; border-collapse: collapse; font-size: 12px; margin-top: 1rem; }
.database-table thead { background-color: #f7f6f3; border-bottom: 2px solid #e9e9e7; }
.database-table th {
  padding: 8px;
  text-align: left;
  font-weight: 600;
  border: 1px solid #e9e9e7;
  white-space: nowrap;
}
.database-table td { padding: 6px 8px; border: 1px solid #e9e9e7; vertical-align: top; }
.database-table tbody tr.even { background-color: #ffffff; }
.database-table tbody tr.odd { background-color: #fafafa; }
.database-table tr { page-break-inside: avoid; }
.database-table td[data-type="checkbox"] { text-align: center; width: 60px; }
.database-table td[data-type="number"] { text-align: right; font-variant-numeric: tabular-nums; }
.database-table a { color: #0066cc; text-decoration: none; }
.empty-row td { text-align: center; color: #9b9a97; }
.empty-cell { color: #b3b3b3; font-style: italic; }
.tag {
  display: inline-block;
  padding: 2px 8px;
  background-color: #e8e8e8;
  border-radius: 3px;
  font-size: 11px;
  margin-right: 4px;
  white-space: nowrap;
}
.checkbox { font-size: 16px; }
.checkbox.checked { color: #0066cc; }
.checkbox.unchecked { color: #999; }
.date, .number { white-space: nowrap; }
"""


def stylesheet(request_type: RequestType) -> str:
    """Stylesheet for a page or database document."""
    body_css = TABLE_CSS if request_type == RequestType.DATABASE else BLOCK_CSS
    return BASE_CSS + LETTERHEAD_CSS + body_css
