"""
OpenAI vision client for shot extraction.

Reads shot names and frame counts from a screenshot of a folder or
file listing.
"""

import base64
import json
import logging
import mimetypes
from pathlib import Path
from typing import Any, List, Optional, Union

from openai import OpenAI, OpenAIError

from ..core.exceptions import ImageAnalysisError
from ..core.shots import ShotCandidate

logger = logging.getLogger(__name__)

EXTRACTION_PROMPT = """Analyze this image. It likely contains a LIST of folders or files representing animation shots (e.g. from Windows File Explorer or macOS Finder).
Look for text patterns like "ShotName - FrameCount" (e.g., "SQ21_SC01_SH02 - 49" or "SQ25_SC03_SH30 - 249").

Task:
1. Extract ALL valid shots found in the list.
2. For each item, separate the 'Shot Name' and the 'Frame Count'.
3. Ignore dates (e.g., 30/12/2025) or file types (e.g., File folder).
4. If the frame count is not explicitly clear but there is a number at the end of the name separated by a dash or space, use that.

Return a JSON object of the form {"shots": [{"name": "SQ21_SC01_SH02", "frames": 49}]}."""


class ShotImageAnalyzer:
    """Extracts shot candidates from images with an OpenAI vision model.

    API and file errors are raised as ImageAnalysisError. A response
    that is not the expected JSON is treated as an empty result.
    """

    def __init__(self, model: str, client: Optional[OpenAI] = None):
        """Initialize the analyzer.

        Args:
            model: OpenAI model name (required)
            client: Preconfigured OpenAI client (defaults to one built
                from the environment)

        Raises:
            ValueError: If model is missing/empty
            ImageAnalysisError: If no client is given and one cannot be
                built, e.g. without an API key
        """
        if not model or not model.strip():
            raise ValueError("model is required and cannot be empty")

        self.model = model
        if client is None:
            try:
                client = OpenAI()
            except OpenAIError as e:
                raise ImageAnalysisError(f"Cannot create OpenAI client: {e}") from e
        self.client = client

    def analyze(self, image: Union[str, Path]) -> List[ShotCandidate]:
        """Extract shot candidates from an image file.

        Args:
            image: Path to a PNG/JPEG/WebP screenshot

        Returns:
            Candidates in the order the model listed them

        Raises:
            ImageAnalysisError: If the image cannot be read or the API call fails
        """
        image_path = Path(image)
        try:
            payload = base64.b64encode(image_path.read_bytes()).decode("ascii")
        except OSError as e:
            raise ImageAnalysisError(f"Cannot read image {image_path}: {e}") from e

        mime_type = mimetypes.guess_type(image_path.name)[0] or "image/png"

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{
                    "role": "user",
                    "content": [
                        {"type": "text", "text": EXTRACTION_PROMPT},
                        {
                            "type": "image_url",
                            "image_url": {"url": f"data:{mime_type};base64,{payload}"},
                        },
                    ],
                }],
                response_format={"type": "json_object"},
            )
        except OpenAIError as e:
            raise ImageAnalysisError("Failed to extract data from image.") from e

        if not response.choices:
            logger.warning("Image analysis returned no choices for %s", image_path)
            return []
        content = response.choices[0].message.content or ""
        return parse_candidates(content)


def parse_candidates(content: str) -> List[ShotCandidate]:
    """Parse a model response into shot candidates.

    Accepts either a bare JSON array or an object with a "shots" array.
    Entries that are not objects with a name are dropped.
    """
    try:
        data: Any = json.loads(content or "[]")
    except json.JSONDecodeError:
        logger.warning("Image analysis response is not valid JSON")
        return []

    if isinstance(data, dict):
        data = data.get("shots", [])
    if not isinstance(data, list):
        logger.warning("Image analysis response has no shot list")
        return []

    candidates = []
    for item in data:
        if not isinstance(item, dict) or not isinstance(item.get("name"), str):
            logger.debug("Dropping malformed analysis item: %r", item)
            continue
        candidates.append(ShotCandidate(name=item["name"], frames=item.get("frames")))
    return candidates
