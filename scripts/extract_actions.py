"""Script to extract action items from a brain dump, or split an assistant reply.

Reads text from a file (or stdin) and prints the result as JSON.

    python scripts/extract_actions.py notes.txt
    echo "Call Sam tomorrow at 3" | python scripts/extract_actions.py
    python scripts/extract_actions.py --reply reply.txt
"""

import argparse
import json
import logging
import os
import sys

# Ensure the main package is in the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from assistant_engine.core.config import get_settings
from assistant_engine.core.dependencies import create_llm_service
from assistant_engine.core.logging_config import configure_logging
from assistant_engine.features.action_extraction import extract_action_items
from assistant_engine.features.reply_parser import parse_structured_output
from assistant_engine.interfaces.llm_interface import LLMServiceError

logger = logging.getLogger(__name__)

def main() -> int:
    parser = argparse.ArgumentParser(description="Extract action items from free text.")
    parser.add_argument("input", nargs="?", help="Path to a text file. Reads stdin when omitted.")
    parser.add_argument("--reply", action="store_true", help="Parse the input as an assistant reply instead (no model call).")
    args = parser.parse_args()

    settings = get_settings()
    configure_logging(settings.log_level)

    if args.input:
        with open(args.input, "r", encoding="utf-8") as f:
            text = f.read()
    else:
        text = sys.stdin.read()

    if args.reply:
        parsed = parse_structured_output(text)
        print(parsed.model_dump_json(by_alias=True, exclude_none=True, indent=2))
        return 0

    try:
        actions = extract_action_items(text, create_llm_service(settings))
    except LLMServiceError as e:
        logger.error(f"Extraction failed: {e}")
        return 1

    if not actions:
        logger.info("No action items found.")
    print(json.dumps([action.model_dump(by_alias=True, exclude_none=True) for action in actions], indent=2))
    return 0

if __name__ == "__main__":
    sys.exit(main())
