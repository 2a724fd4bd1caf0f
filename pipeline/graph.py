from langgraph.graph import StateGraph, END
from pipeline.state import DiagnosisState
from pipeline.nodes import (
    node_prompt,
    node_diagnose,
    node_extract,
)


def should_extract(state):
    """Router: an upstream failure skips extraction."""
    if state.get("error"):
        return END
    return "extract"


def build_graph():
    workflow = StateGraph(DiagnosisState)

    workflow.add_node("build_prompt", node_prompt)
    workflow.add_node("diagnose", node_diagnose)
    workflow.add_node("extract", node_extract)

    workflow.set_entry_point("build_prompt")
    workflow.add_edge("build_prompt", "diagnose")

    workflow.add_conditional_edges(
        "diagnose",
        should_extract,
        {
            "extract": "extract",
            END: END,
        },
    )
    workflow.add_edge("extract", END)

    return workflow.compile()


pipeline = build_graph()
