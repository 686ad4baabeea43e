import os
import sys


def _ensure_src_on_path() -> None:
    src_path = os.path.join(os.path.dirname(__file__), "src")
    if os.path.isdir(src_path) and src_path not in sys.path:
        sys.path.insert(0, src_path)


def main() -> None:
    try:
        from yard_app.__main__ import main as app_main
    except ImportError:
        _ensure_src_on_path()
        from yard_app.__main__ import main as app_main
    app_main()


if __name__ == "__main__":
    main()
