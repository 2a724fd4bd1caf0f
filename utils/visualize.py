from __future__ import annotations

import sys

from pipeline.graph import pipeline


def render(fmt: str = "ascii") -> str:
    """Return the diagnosis graph as `ascii` art or `mermaid` source."""
    graph = pipeline.get_graph()
    if fmt == "mermaid":
        return graph.draw_mermaid()
    return graph.draw_ascii()


def save_mermaid_png(path: str = "graph.png") -> None:
    """
    Render the diagnosis graph as a PNG through mermaid.ink.

    Requires internet access.
    """
    from langchain_core.runnables.graph import MermaidDrawMethod

    png = pipeline.get_graph().draw_mermaid_png(draw_method=MermaidDrawMethod.API)
    with open(path, "wb") as f:
        f.write(png)
    print(f"Saved → {path}")


if __name__ == "__main__":
    formats = sys.argv[1:] or ["ascii", "mermaid"]
    for fmt in formats:
        if fmt.endswith(".png"):
            save_mermaid_png(fmt)
        else:
            print(render(fmt))
