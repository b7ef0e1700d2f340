"""Utility for generating Markdown tables whose cells cannot break the layout."""


def escape_table_cell(cell: str) -> str:
    """Escape pipes and bare angle brackets; code spans and Badge tags are kept."""
    cell = cell.replace("|", "\\|")
    if "<" not in cell and ">" not in cell:
        return cell
    out: list[str] = []
    i = 0
    n = len(cell)
    while i < n:
        ch = cell[i]
        if ch == "`":
            end = cell.find("`", i + 1)
            if end != -1:
                out.append(cell[i : end + 1])
                i = end + 1
                continue
        if ch == "\\" and i + 1 < n and cell[i + 1] in "<>":
            out.append(cell[i : i + 2])
            i += 2
            continue
        if ch == "<" and cell.startswith("<Badge ", i):
            close = cell.find("/>", i)
            if close != -1:
                out.append(cell[i : close + 2])
                i = close + 2
                continue
        if ch == "<":
            out.append("\\<")
        elif ch == ">":
            out.append("\\>")
        else:
            out.append(ch)
        i += 1
    return "".join(out)


def md_table(headers: list[str], rows: list[list[str]]) -> str:
    """Generate a Markdown table."""
    if not rows:
        return ""
    out = [
        "| " + " | ".join(escape_table_cell(h) for h in headers) + " |",
        "|" + "|".join(["---"] * len(headers)) + "|",
    ]
    out.extend("| " + " | ".join(escape_table_cell(c) for c in r) + " |" for r in rows)
    return "\n".join(out)
