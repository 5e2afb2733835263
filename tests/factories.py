"""Builders for raw facts and fact files used across the test suite."""

import json
from pathlib import Path
from typing import Any


def method_def(fqn: str, **overrides: Any) -> dict[str, Any]:
    """Raw method_definition fact; class and name are derived from the FQN."""
    class_fqn, _, name = fqn.rpartition(".")
    namespace = class_fqn.rpartition(".")[0]
    fact = {
        "type": "method_definition",
        "method": fqn,
        "method_name": name,
        "class": class_fqn,
        "namespace": namespace,
        "return_type": "void",
        "access_modifier": "public",
        "file_path": f"src/{class_fqn.rsplit('.', 1)[-1]}.cs",
        "line_number": 10,
    }
    fact.update(overrides)
    return fact


def class_def(fqn: str, **overrides: Any) -> dict[str, Any]:
    namespace, _, name = fqn.rpartition(".")
    fact = {
        "type": "class_definition",
        "class": fqn,
        "class_name": name,
        "namespace": namespace,
        "access_modifier": "public",
        "file_path": f"src/{name}.cs",
        "line_number": 1,
    }
    fact.update(overrides)
    return fact


def call(caller: str, callee: str, line: int = 5, **overrides: Any) -> dict[str, Any]:
    """Raw method_call fact; classes and namespaces are derived from the FQNs."""
    caller_class = caller.rpartition(".")[0]
    callee_class = callee.rpartition(".")[0]
    fact = {
        "type": "method_call",
        "caller": caller,
        "callee": callee,
        "caller_class": caller_class,
        "callee_class": callee_class,
        "caller_namespace": caller_class.rpartition(".")[0],
        "callee_namespace": callee_class.rpartition(".")[0],
        "file_path": f"src/{caller_class.rsplit('.', 1)[-1]}.cs",
        "line_number": line,
    }
    fact.update(overrides)
    return fact


def write_jsonl(path: Path, facts: list[dict[str, Any]]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("".join(json.dumps(f) + "\n" for f in facts))
    return path




def interface_def(fqn: str, **overrides: Any) -> dict[str, Any]:
    namespace, _, name = fqn.rpartition(".")
    fact = {
        "type": "interface_definition",
        "interface": fqn,
        "interface_name": name,
        "namespace": namespace,
        "access_modifier": "public",
        "file_path": f"src/{name}.cs",
        "line_number": 1,
    }
    fact.update(overrides)
    return fact


def sample_project() -> list[dict[str, Any]]:
    """A small web app: Program.Main -> HomeController.Index -> Service.Run -> Repo.

    Repo.Save calls back into Service.Run, and Index calls Run from two lines.
    """
    return [
        class_def("App.Main.Program"),
        class_def("App.Web.HomeController"),
        class_def("App.Core.Service", interfaces="IService"),
        class_def("App.Core.CachedService", base_class="Service"),
        class_def("App.Core.Repo"),
        interface_def("App.Core.IService"),
        method_def("App.Main.Program.Main", is_static=True),
        method_def("App.Web.HomeController.Index", return_type="IActionResult"),
        method_def("App.Core.Service.Run"),
        method_def("App.Core.Repo.Save", return_type="bool"),
        method_def("App.Core.Repo.Load"),
        call("App.Main.Program.Main", "App.Web.HomeController.Index", line=5),
        call("App.Web.HomeController.Index", "App.Core.Service.Run", line=12),
        call("App.Web.HomeController.Index", "App.Core.Service.Run", line=14),
        call("App.Core.Service.Run", "App.Core.Repo.Save", line=20),
        call("App.Core.Service.Run", "App.Core.Repo.Load", line=21),
        call("App.Core.Repo.Save", "App.Core.Service.Run", line=30),
    ]
