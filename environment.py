"""
Bebop Environment
A stack of binding frames; lookups walk from the innermost frame to the root
"""

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

Frame = Dict[str, Any]


class Environment:
  """Lexical scope chain kept as an explicit list of dict frames

  frames[0] is the root frame holding the standard library and every `def`.
  The chain has a single owner; closures copy the frame they capture instead
  of sharing it.
  """

  def __init__(self, frames: Optional[List[Frame]] = None, debug: bool = False):
    self.frames: List[Frame] = list(frames) if frames else []
    self.debug = debug

  def push(self, frame: Optional[Frame] = None) -> None:
    """Add a new innermost frame"""
    self.frames.append(frame if frame is not None else {})

  def pop(self) -> Optional[Frame]:
    """Remove and return the innermost frame, or None when the chain is empty"""
    if not self.frames:
      return None
    return self.frames.pop()

  def peek(self) -> Optional[Frame]:
    """Innermost frame without removing it"""
    return self.frames[-1] if self.frames else None

  @contextmanager
  def scope(self, frame: Optional[Frame] = None) -> Iterator[Frame]:
    """Push a frame for the duration of a block, popping it even on error"""
    self.push(frame)
    try:
      yield self.frames[-1]
    finally:
      self.pop()

  def insert(self, key: str, value: Any) -> None:
    """Bind in the innermost frame only (shadows outer bindings)"""
    if self.frames:
      self.frames[-1][key] = value

  def insert_global(self, key: str, value: Any) -> None:
    """Bind in the root frame regardless of the current depth"""
    if self.frames:
      self.frames[0][key] = value

  def get(self, key: str) -> Optional[Any]:
    """Search innermost to outermost, None when unbound"""
    for frame in reversed(self.frames):
      if key in frame:
        return frame[key]
    return None

  def capture(self) -> Frame:
    """Private copy of the innermost frame for a closure to own"""
    frame = self.peek()
    return dict(frame) if frame is not None else {}

  def __len__(self) -> int:
    return len(self.frames)

  def __contains__(self, key: str) -> bool:
    return any(key in frame for frame in self.frames)

  def __repr__(self) -> str:
    names = [f"{{{', '.join(sorted(frame))}}}" for frame in self.frames]
    return f"<Environment chain: {' -> '.join(names)}>"
