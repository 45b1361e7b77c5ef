#!/usr/bin/env python3
from __future__ import annotations

import json
from typing import Any

import numpy as np

from ftcs import FTCSResult

SCHEMA_VERSION = 1


def _downsample_time_indices(n_frames: int, max_frames: int) -> np.ndarray:
    if max_frames <= 0:
        raise ValueError("max_frames must be positive")
    if n_frames <= max_frames:
        return np.arange(n_frames, dtype=np.int64)
    raw = np.linspace(0, n_frames - 1, num=max_frames)
    idx = np.unique(np.round(raw).astype(np.int64))
    if idx[0] != 0:
        idx = np.insert(idx, 0, 0)
    if idx[-1] != n_frames - 1:
        idx = np.append(idx, n_frames - 1)
    return idx


def save_result_npz(
    filename: str,
    result: FTCSResult,
    *,
    max_frames: int = 500,
    metadata: dict[str, Any] | None = None,
) -> str:
    """
    Write a solver result to a compressed .npz file.

    Only up to `max_frames` time columns of U are stored; the first and the
    last column are always kept so the error can be recomputed from the file.
    """
    idx = _downsample_time_indices(int(result.t.shape[0]), int(max_frames))
    config_json = json.dumps(result.config.as_dict(), sort_keys=True)
    metadata_json = json.dumps(metadata or {}, sort_keys=True)
    p = result.params
    np.savez_compressed(
        filename,
        schema_version=np.asarray(SCHEMA_VERSION, dtype=np.int64),
        config_json=np.asarray(config_json),
        metadata_json=np.asarray(metadata_json),
        error=np.asarray(result.error, dtype=np.float64),
        dx=np.asarray(p.dx, dtype=np.float64),
        dt=np.asarray(p.dt, dtype=np.float64),
        r=np.asarray(p.r, dtype=np.float64),
        x_values=np.asarray(result.x, dtype=np.float64),
        t_values=np.asarray(result.t[idx], dtype=np.float64),
        U=np.asarray(result.U[:, idx], dtype=np.float64),
        exact=np.asarray(result.exact, dtype=np.float64),
        step_indices=np.asarray(idx, dtype=np.int64),
    )
    return filename


def load_result_npz(filename: str) -> dict:
    with np.load(filename, allow_pickle=False) as data:
        out = {k: data[k] for k in data.files}
    out["schema_version"] = int(out["schema_version"].item())
    if out["schema_version"] != SCHEMA_VERSION:
        raise ValueError(
            f"Unsupported schema_version {out['schema_version']} in {filename!r}"
        )
    out["config"] = json.loads(str(out["config_json"].item()))
    out["metadata"] = json.loads(str(out["metadata_json"].item()))
    for key in ("error", "dx", "dt", "r"):
        out[key] = float(out[key].item())
    return out
