import logging

from pydantic import ValidationError

from code_mentor.core.errors import LLMError, ResponseParseError
from code_mentor.models.visual import Visualization
from code_mentor.services.llm import LLMClient
from code_mentor.utils.text_utils import extract_json_object

logger = logging.getLogger(__name__)

VISUAL_PROMPT = """You are an expert software visualization tool. Analyze the provided code and generate a beginner-friendly visual representation of its logic flow, with every piece of code logic represented by a block.

CODE ({language}):
```{language}
{code}
```

Create a flowchart that explains the control flow and logic of this code.

Return ONLY a JSON object with the following structure:
{{
  "nodes": [
    {{
      "id": "unique-id",
      "position": {{"x": 0, "y": 0}},
      "data": {{"label": "Node Label Text"}},
      "style": {{"background": "color", "border": "color", "width": 180, "borderRadius": 8}}
    }}
  ],
  "edges": [
    {{
      "id": "unique-id",
      "source": "source-node-id",
      "target": "target-node-id",
      "label": "optional label",
      "animated": false,
      "style": {{"stroke": "color"}}
    }}
  ],
  "title": "Brief title describing the visualization",
  "description": "Short explanation of what this diagram shows"
}}

GUIDELINES:
1. Position nodes in a logical flow (top-to-bottom or left-to-right)
2. Start positions at (0,0) and space nodes at least 150px apart
3. Keep node labels concise but descriptive
4. Use different node styles/colors for different kinds of operations
5. Include conditional branches, loops, and function calls
6. Make sure all node IDs are unique
7. Ensure every edge connects existing nodes
8. The diagram should be complete but not overly complex
"""


def parse_visualization(text: str) -> Visualization:
    try:
        data = extract_json_object(text)
    except ResponseParseError as e:
        logger.error("Failed to parse visualization JSON: %s", e.details)
        raise ResponseParseError("Failed to parse visualization data", details=e.details)

    if not isinstance(data.get("nodes"), list) or not isinstance(data.get("edges"), list):
        raise ResponseParseError("Invalid visualization data structure")

    try:
        visual = Visualization.model_validate(data)
    except ValidationError as e:
        raise ResponseParseError("Invalid visualization data structure", details=str(e))

    node_ids = {n.id for n in visual.nodes}
    edges = [e for e in visual.edges if e.source in node_ids and e.target in node_ids]
    if len(edges) != len(visual.edges):
        logger.warning("Dropped %d edges pointing to unknown nodes", len(visual.edges) - len(edges))
        visual.edges = edges
    return visual


class VisualService:
    def __init__(self, llm: LLMClient):
        self.llm = llm

    def generate(self, code: str, language: str) -> Visualization:
        prompt = VISUAL_PROMPT.format(code=code, language=language)
        try:
            text = self.llm.complete(prompt, json_mode=True)
        except LLMError as e:
            raise LLMError("Failed to generate visual explanation", details=e.details or e.message)
        return parse_visualization(text)
