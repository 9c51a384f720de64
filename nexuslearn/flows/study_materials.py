"""
Flashcards and Mermaid mind maps generated from text or a PDF.
"""

from __future__ import annotations

from nexuslearn.schemas.flows import (
    FlashcardInput,
    FlashcardOutput,
    MindMapInput,
    MindMapOutput,
)

from .base import resolve_source_text, run_structured_prompt

FLASHCARD_PROMPT = """You are an expert at creating concise and effective study materials.
Based on the following text, generate a set of flashcards. Each flashcard should have a clear question and a corresponding answer.
Focus on key concepts, definitions, and important facts.

Source Text:
{text}
"""

MIND_MAP_PROMPT = """You are an expert at structuring information visually. Your task is to create a mind map from the provided text.
The mind map should be in Mermaid JS 'graph' or 'mindmap' syntax.
The central topic is "{topic}". Identify the main ideas and connect them to the central topic.
Then, add supporting details and sub-topics branching out from the main ideas.
Keep the nodes concise.

Example of Mermaid 'graph' syntax:
graph TD
    A[Central Topic] --> B(Main Idea 1);
    A --> C(Main Idea 2);
    B --> B1(Detail 1.1);
    B --> B2(Detail 1.2);

Example of Mermaid 'mindmap' syntax:
mindmap
  root((Central Topic))
    Main Idea 1
      Detail 1.1
      Detail 1.2
    Main Idea 2

Now, generate a mind map for the following text:
Source Text:
{text}
"""


async def generate_flashcards(payload: FlashcardInput) -> FlashcardOutput:
    text = await resolve_source_text(payload.text, payload.pdf_data_uri)
    return await run_structured_prompt(
        FLASHCARD_PROMPT.format(text=text), FlashcardOutput
    )


async def generate_mind_map(payload: MindMapInput) -> MindMapOutput:
    text = await resolve_source_text(payload.text, payload.pdf_data_uri)
    result = await run_structured_prompt(
        MIND_MAP_PROMPT.format(topic=payload.topic, text=text), MindMapOutput
    )
    # Models sometimes fence the diagram inside the JSON string
    map_data = result.map_data.strip()
    if map_data.startswith("```"):
        map_data = map_data.strip("`").removeprefix("mermaid").strip()
    return MindMapOutput(map_data=map_data)
