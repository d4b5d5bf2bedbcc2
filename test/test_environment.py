"""
Environment tests for Bebop
Frame stack semantics: shadowing, global vs local insertion, scoping
"""

import pytest
from environment import Environment
from values import Num


class TestFrameStack:
  """Push, pop and peek"""

  def test_empty_environment(self):
    env = Environment()
    assert len(env) == 0
    assert env.peek() is None
    assert env.pop() is None
    assert env.get("x") is None

  def test_push_then_pop_returns_frame(self):
    env = Environment()
    frame = {"x": Num(1)}
    env.push(frame)
    assert env.peek() is frame
    assert env.pop() is frame
    assert len(env) == 0

  def test_push_without_frame_adds_empty_one(self):
    env = Environment()
    env.push()
    assert env.peek() == {}


class TestLookup:
  """Innermost-first resolution"""

  @pytest.fixture
  def env(self):
    return Environment([{"x": Num(1), "y": Num(2)}, {"x": Num(10)}])

  def test_inner_frame_shadows_outer(self, env):
    assert env.get("x") == Num(10)

  def test_falls_through_to_outer_frame(self, env):
    assert env.get("y") == Num(2)

  def test_unbound_is_none(self, env):
    assert env.get("z") is None

  def test_contains(self, env):
    assert "y" in env
    assert "z" not in env


class TestInsertion:
  """Local and global binding"""

  def test_insert_targets_innermost_frame(self):
    env = Environment([{}, {}])
    env.insert("x", Num(1))
    assert env.frames[1] == {"x": Num(1)}
    assert env.frames[0] == {}

  def test_insert_global_targets_root_frame(self):
    env = Environment([{}, {}])
    env.insert_global("x", Num(1))
    assert env.frames[0] == {"x": Num(1)}
    assert env.frames[1] == {}

  def test_insert_into_empty_environment_is_noop(self):
    env = Environment()
    env.insert("x", Num(1))
    env.insert_global("y", Num(2))
    assert len(env) == 0


class TestScopes:
  """Scoped frames and closure capture"""

  def test_scope_pops_on_exit(self):
    env = Environment([{}])
    with env.scope({"x": Num(1)}):
      assert env.get("x") == Num(1)
      assert len(env) == 2
    assert env.get("x") is None
    assert len(env) == 1

  def test_scope_pops_on_error(self):
    env = Environment([{}])
    with pytest.raises(ValueError):
      with env.scope({"x": Num(1)}):
        raise ValueError("boom")
    assert len(env) == 1

  def test_capture_is_a_private_copy(self):
    env = Environment([{"x": Num(1)}])
    captured = env.capture()
    env.insert("x", Num(2))
    assert captured == {"x": Num(1)}

  def test_capture_of_empty_environment(self):
    assert Environment().capture() == {}
