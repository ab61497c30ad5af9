"""Root conftest: ensure the checkout's src is first in sys.path."""
import sys
from pathlib import Path

# Keep the checkout's src ahead of any installed mic_volume so tests
# exercise the working tree.
_src = str(Path(__file__).parent / "src")
if _src not in sys.path:
    sys.path.insert(0, _src)
