#!/usr/bin/env python3
"""
Run the coverage + strategy pipeline over a directory of documents.

.txt files become raw text. .json files are either a document record
({"raw_text": ..., "structured_extract": ...}) or a bare structured extract.
The generative fallback is not used; output is deterministic.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import List

from casebrain_engine.pipeline import analyse
from casebrain_engine.schemas import Document, PracticeArea


def _load_documents(directory: Path) -> List[Document]:
    documents = []
    for path in sorted(directory.iterdir()):
        if path.suffix.lower() == ".txt":
            documents.append(Document(
                id=path.stem,
                name=path.name,
                raw_text=path.read_text(encoding="utf-8", errors="replace"),
            ))
        elif path.suffix.lower() == ".json":
            data = json.loads(path.read_text(encoding="utf-8"))
            if isinstance(data, dict) and ("raw_text" in data or "structured_extract" in data):
                documents.append(Document(
                    id=data.get("id") or path.stem,
                    name=data.get("name") or path.name,
                    raw_text=data.get("raw_text"),
                    structured_extract=data.get("structured_extract"),
                ))
            else:
                documents.append(Document(id=path.stem, name=path.name, structured_extract=data))
    return documents


def main() -> int:
    parser = argparse.ArgumentParser(description="Analyse a directory of case documents.")
    parser.add_argument("path", help="Directory containing .txt / .json documents")
    parser.add_argument(
        "--practice-area",
        default=PracticeArea.CRIMINAL.value,
        choices=[p.value for p in PracticeArea],
        help="Practice area (default: criminal)",
    )
    parser.add_argument("--category", default=None, help="Offence or claim type, e.g. 'assault'")
    parser.add_argument("--policy", default=None, help="Risk policy name for option ranking")
    args = parser.parse_args()

    directory = Path(args.path)
    if not directory.is_dir():
        print(f"Not a directory: {directory}", file=sys.stderr)
        return 1

    documents = _load_documents(directory)
    result = asyncio.run(analyse(
        documents,
        practice_area=PracticeArea(args.practice_area),
        category=args.category,
        policy=args.policy,
    ))

    output = {
        "category": result.category.value,
        "documents": len(documents),
        "admission": result.admission.model_dump(mode="json"),
        "evidence_items": [item.model_dump(mode="json") for item in result.coverage.items],
        "completeness": result.coverage.completeness.model_dump(mode="json"),
        "bundle": result.coverage.bundle.model_dump(mode="json"),
        "gate": result.gate.model_dump(mode="json"),
        "strategy": result.strategy.model_dump(mode="json"),
        "options": result.options.model_dump(mode="json"),
    }
    print(json.dumps(output, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
