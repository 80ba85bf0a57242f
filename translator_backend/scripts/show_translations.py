import json
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from translator_backend.services import PersistenceError, RelayClient


def main():
    try:
        rows = RelayClient().list()
    except PersistenceError as e:
        print(f"Failed to fetch translations: {e}")
        return
    for row in rows:
        print(json.dumps(row, ensure_ascii=False))
    print("total:", len(rows))


if __name__ == "__main__":
    main()
