"""Text renderings of a task dependency DAG (ascii, Graphviz DOT, Mermaid)."""

from __future__ import annotations

from collections.abc import Sequence

from dependency_engine.models import DependencyGraph
from tasks.types import HIGH_PRIORITY, Task, TaskStatus

DAG_STYLES = ("ascii", "dot", "mermaid")

_DOT_COLOURS = {
    TaskStatus.COMPLETED: "lightgreen",
    TaskStatus.IN_PROGRESS: "lightblue",
    TaskStatus.BLOCKED: "lightcoral",
    TaskStatus.PENDING: "lightyellow",
    TaskStatus.CANCELLED: "lightgray",
}

_MERMAID_CLASSES = {
    TaskStatus.COMPLETED: "completed",
    TaskStatus.IN_PROGRESS: "inProgress",
    TaskStatus.BLOCKED: "blocked",
    TaskStatus.PENDING: "pending",
    TaskStatus.CANCELLED: "cancelled",
}

_MAX_LISTED_DEPENDENTS = 3


def render_dag(tasks: Sequence[Task], graph: DependencyGraph, style: str = "ascii") -> str:
    """Render ``tasks`` in one of ``DAG_STYLES``."""
    if style == "dot":
        return render_dot(tasks)
    if style == "mermaid":
        return render_mermaid(tasks)
    if style == "ascii":
        return render_ascii(tasks, graph)
    raise ValueError(f"Unknown DAG style '{style}'; expected one of {', '.join(DAG_STYLES)}")


def render_ascii(tasks: Sequence[Task], graph: DependencyGraph) -> str:
    titles = {task.id: task.title for task in tasks}
    by_id = {task.id: task for task in tasks}
    lines = ["Task Dependency Graph (DAG):", ""]

    ready = [by_id[task_id] for task_id in graph.ready_ids]
    blocked = [by_id[task_id] for task_id in graph.blocked_ids]
    completed = [t for t in tasks if t.status == TaskStatus.COMPLETED]

    if ready:
        lines.append("READY TO START:")
        for task in ready:
            dependents = graph.nodes[task.id].dependents
            shown = [titles[d] for d in dependents[:_MAX_LISTED_DEPENDENTS]]
            suffix = ""
            if shown:
                extra = len(dependents) - len(shown)
                more = f", +{extra} more" if extra > 0 else ""
                suffix = f" -> [{', '.join(shown)}{more}]"
            lines.append(f"  * {task.title}{suffix}")
        lines.append("")

    if blocked:
        lines.append("BLOCKED:")
        for task in blocked:
            blockers = [titles[d] for d in graph.nodes[task.id].blocked_by if d in titles]
            suffix = f" <- blocked by [{', '.join(blockers)}]" if blockers else ""
            lines.append(f"  * {task.title}{suffix}")
        lines.append("")

    if completed:
        lines.append("COMPLETED:")
        lines.extend(f"  * {task.title}" for task in completed)
        lines.append("")

    lines.append("DEPENDENCY RELATIONSHIPS:")
    for task in tasks:
        dep_titles = [titles[d] for d in task.dependencies if d in titles]
        if dep_titles:
            lines.append(f"  {task.title} <- depends on: [{', '.join(dep_titles)}]")
    return "\n".join(lines)


def render_dot(tasks: Sequence[Task]) -> str:
    lines = [
        "digraph TaskDAG {",
        "  rankdir=TB;",
        "  node [shape=box, style=rounded];",
        "",
    ]
    for task in tasks:
        colour = _DOT_COLOURS.get(task.status, "white")
        pen = ", penwidth=3" if task.priority >= HIGH_PRIORITY else ""
        lines.append(
            f'  "{task.id}" [label="{_escape(task.title)}", fillcolor={colour}, '
            f'style="rounded,filled"{pen}];'
        )
    lines.append("")
    known = {task.id for task in tasks}
    for task in tasks:
        for dep in task.dependencies:
            if dep in known:
                lines.append(f'  "{dep}" -> "{task.id}";')
    lines.append("}")
    return "\n".join(lines)


def render_mermaid(tasks: Sequence[Task]) -> str:
    aliases = {task.id: f"T{index + 1}" for index, task in enumerate(tasks)}
    lines = ["graph TD"]
    for task in tasks:
        css = _MERMAID_CLASSES.get(task.status)
        suffix = f":::{css}" if css else ""
        lines.append(f'  {aliases[task.id]}["{_escape(task.title)}"]{suffix}')
    lines.append("")
    for task in tasks:
        for dep in task.dependencies:
            if dep in aliases:
                lines.append(f"  {aliases[dep]} --> {aliases[task.id]}")
    lines.extend(
        [
            "",
            "  classDef completed fill:#90EE90,stroke:#333,stroke-width:2px",
            "  classDef inProgress fill:#87CEEB,stroke:#333,stroke-width:2px",
            "  classDef blocked fill:#F08080,stroke:#333,stroke-width:2px",
            "  classDef pending fill:#FFFFE0,stroke:#333,stroke-width:2px",
            "  classDef cancelled fill:#D3D3D3,stroke:#333,stroke-width:2px",
        ]
    )
    return "\n".join(lines)


def _escape(text: str) -> str:
    return text.replace('"', '\\"')
