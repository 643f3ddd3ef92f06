"""Grading every exercise at once and recording the results as JSON."""

from __future__ import annotations

import json
import os
import threading
import time
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, field
from pathlib import Path

from .exercise import Exercise, ExerciseFailed
from .run import run

DEFAULT_RESULT_PATH = ".github/result/check_result.json"


@dataclass
class ExerciseResult:
    """Whether a single exercise passed."""

    name: str
    result: bool


@dataclass
class ExerciseStatistics:
    """Totals over a grading session."""

    total_exercations: int
    total_succeeds: int = 0
    total_failures: int = 0
    total_time: int = 0


@dataclass
class ExerciseCheckList:
    """The full report of a grading session."""

    exercises: list[ExerciseResult] = field(default_factory=list)
    user_name: str | None = None
    statistics: ExerciseStatistics = field(
        default_factory=lambda: ExerciseStatistics(total_exercations=0)
    )

    def to_dict(self) -> dict:
        """Return the JSON-ready representation."""
        return asdict(self)

    def to_json(self) -> str:
        """Serialise as pretty-printed JSON."""
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)


def _now() -> int:
    return int(time.time())


def grade_all(exercises: Iterable[Exercise], verbose: bool = True) -> ExerciseCheckList:
    """Run every exercise concurrently and collect pass/fail results."""
    exercises = list(exercises)
    total = len(exercises)
    started = _now()
    check_list = ExerciseCheckList(
        statistics=ExerciseStatistics(total_exercations=total)
    )
    stats = check_list.statistics
    lock = threading.Lock()

    def grade(exercise: Exercise, task_start: int) -> None:
        try:
            run(exercise, verbose)
            passed = True
        except ExerciseFailed:
            passed = False
        with lock:
            if passed:
                stats.total_succeeds += 1
                print(f"{exercise.name}执行成功")
            else:
                print(f"{exercise.name}执行失败")
            print(f"总的题目数: {total}")
            print(f"当前做正确的题目数: {stats.total_succeeds}")
            print(f"当前修改试卷耗时: {_now() - task_start} s")
            check_list.exercises.append(ExerciseResult(name=exercise.name, result=passed))
            if not passed:
                stats.total_failures += 1

    with ThreadPoolExecutor(max_workers=os.cpu_count() or 1) as pool:
        futures = [pool.submit(grade, exercise, _now()) for exercise in exercises]
        for future in futures:
            future.result()

    total_time = _now() - started
    print(
        "===============================试卷批改完成,总耗时: "
        f"{total_time} s; =================================="
    )
    stats.total_time = total_time
    return check_list


def write_results(
    check_list: ExerciseCheckList, path: str | os.PathLike = DEFAULT_RESULT_PATH
) -> None:
    """Write the check list to *path* as pretty-printed JSON."""
    Path(path).write_text(check_list.to_json(), encoding="utf-8")