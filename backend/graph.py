"""
LangGraph state machine — fetch, decode, extract.

Graph topology:
  START → fetcher → reader → extractor → END
  START → fetcher → vendor_fallback → reader → extractor → END   (preview URL, fetch failed)

Conditional routing after fetcher: checks whether state["pdf_bytes"] arrived.
Nodes raise the pipeline's own exceptions; graph.invoke() propagates them to
IsinPipeline, which classifies them.
"""

from typing import Callable, Optional

from langgraph.graph import END, StateGraph

from agents.extractor import extractor_node
from agents.fetcher import fetcher_node, route_after_fetcher
from agents.reader import reader_node
from agents.vendor_fallback import vendor_fallback_node
from state import PipelineState
from tools.pdf_fetcher import PdfFetcher
from tools.pdf_reader import DecodedPdf, extract_pdf_text


def build_graph(
    fetcher: PdfFetcher,
    decoder: Callable[[bytes], DecodedPdf] = extract_pdf_text,
    decode_timeout: Optional[float] = None,
):
    """Compile the pipeline graph around the given collaborators."""

    def fetch(state: PipelineState) -> dict:
        return fetcher_node(state, fetcher)

    def fallback(state: PipelineState) -> dict:
        return vendor_fallback_node(state, fetcher)

    def read(state: PipelineState) -> dict:
        return reader_node(state, decoder=decoder, timeout=decode_timeout)

    workflow = StateGraph(PipelineState)

    workflow.add_node("fetcher", fetch)
    workflow.add_node("vendor_fallback", fallback)
    workflow.add_node("reader", read)
    workflow.add_node("extractor", extractor_node)

    workflow.set_entry_point("fetcher")

    workflow.add_conditional_edges("fetcher", route_after_fetcher, {
        "reader": "reader",
        "vendor_fallback": "vendor_fallback",
    })

    workflow.add_edge("vendor_fallback", "reader")
    workflow.add_edge("reader", "extractor")
    workflow.add_edge("extractor", END)

    return workflow.compile()
