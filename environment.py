"""
Lox runtime environments
A scope is a dictionary of bindings plus a reference to its enclosing scope.
Declarations write to the innermost scope; lookup and assignment walk outward.
"""

from typing import Dict, Iterator, Optional, Tuple

from error_handling import UndefinedVariableError


# ============================================================================
# DATA STRUCTURES
# ============================================================================

def make_runtime_env(parent: Optional[Dict] = None, bindings: Optional[Dict] = None) -> Dict:
  """Create a runtime environment enclosed by parent"""
  return {
      'parent': parent,
      'bindings': dict(bindings) if bindings else {}
  }


def make_child_env(parent: Dict) -> Dict:
  """Create the scope for a block"""
  return make_runtime_env(parent)


# ============================================================================
# ENVIRONMENT OPERATIONS
# ============================================================================

def env_define(env: Dict, name: str, value: Dict) -> None:
  """Bind name in this scope, shadowing any outer binding"""
  env['bindings'][name] = value


def env_find(env: Dict, name: str) -> Optional[Dict]:
  """Return the nearest scope that binds name"""
  scope = env
  while scope is not None:
    if name in scope['bindings']:
      return scope
    scope = scope['parent']
  return None


def env_lookup_value(env: Dict, name: str) -> Optional[Dict]:
  """Look up a value in the environment chain"""
  scope = env_find(env, name)
  if scope is None:
    return None
  return scope['bindings'][name]


def env_get(env: Dict, name: str, line: int = 0, column: int = 0) -> Dict:
  """Look up name, raising UndefinedVariableError when unbound"""
  scope = env_find(env, name)
  if scope is None:
    raise UndefinedVariableError(f"Undefined variable '{name}'.", line, column)
  return scope['bindings'][name]


def env_assign(env: Dict, name: str, value: Dict, line: int = 0, column: int = 0) -> None:
  """Overwrite the nearest existing binding of name; never declares"""
  scope = env_find(env, name)
  if scope is None:
    raise UndefinedVariableError(f"Undefined variable '{name}'.", line, column)
  scope['bindings'][name] = value


def env_depth(env: Dict) -> int:
  """Number of scopes in the chain, the root included"""
  depth = 0
  scope = env
  while scope is not None:
    depth += 1
    scope = scope['parent']
  return depth


def iter_visible_bindings(env: Dict) -> Iterator[Tuple[str, Dict]]:
  """Yield the bindings visible from env, innermost first, shadowed ones skipped"""
  seen = set()
  scope = env
  while scope is not None:
    for name, value in scope['bindings'].items():
      if name not in seen:
        seen.add(name)
        yield name, value
    scope = scope['parent']
