import argparse
import json
import logging
import os
import sys

# Add project root to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from translator_backend.models.submission_models import Mode, TranslationRequest
from translator_backend.services import TranslatorError, build_orchestrator


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Translate a message with one or more models.")
    parser.add_argument("message")
    parser.add_argument("--language", default="Hindi")
    parser.add_argument("--model", default="gpt-3.5-turbo")
    parser.add_argument("--correct", action="store_true", help="correct the message before translating")
    parser.add_argument("--rate", nargs="+", metavar="MODEL", help="translate with these models and rate each result")
    parser.add_argument("--store", action="store_true", help="save the result through the relay")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    request = TranslationRequest(
        original_text=args.message,
        target_language=args.language,
        model=args.model,
        mode=Mode.CORRECT if args.correct else Mode.TRANSLATE,
        rating_enabled=bool(args.rate),
        persist_enabled=args.store,
        selected_models=tuple(args.rate or ()),
    )
    orchestrator = build_orchestrator()
    try:
        state = orchestrator.submit(request)
    except TranslatorError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(json.dumps(state.to_dict(), ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
