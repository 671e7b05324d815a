"""
Device management utilities for PyTorch.

Provides centralized device detection for the batched deduction phase:
CUDA (NVIDIA), MPS (Apple Silicon), and CPU fallback. The TURING_DEVICE
environment variable overrides detection (e.g. TURING_DEVICE=cpu).
"""

import os

import numpy as np
import torch

_DEVICE_NAMES = {
    "cuda": "CUDA",
    "mps": "MPS (Apple Silicon)",
    "cpu": "CPU",
}


def _detect_device() -> torch.device:
    override = os.environ.get("TURING_DEVICE")
    if override:
        return torch.device(override)
    if torch.cuda.is_available():
        return torch.device("cuda")
    if hasattr(torch.backends, "mps") and torch.backends.mps.is_available():
        return torch.device("mps")
    return torch.device("cpu")


DEFAULT_DEVICE = _detect_device()
DEVICE_NAME = _DEVICE_NAMES.get(DEFAULT_DEVICE.type, DEFAULT_DEVICE.type.upper())


def get_device() -> torch.device:
    """
    Get the default compute device.

    Returns:
        torch.device: TURING_DEVICE if set, else best available (CUDA > MPS > CPU)
    """
    return DEFAULT_DEVICE


def get_device_name() -> str:
    """
    Get human-readable device name.

    Returns:
        str: Device name (e.g., "CUDA", "MPS (Apple Silicon)", "CPU")
    """
    return DEVICE_NAME


def to_numpy(tensor: torch.Tensor) -> np.ndarray:
    """
    Convert PyTorch tensor to NumPy array.

    Handles device transfers (GPU -> CPU) automatically.

    Args:
        tensor: PyTorch tensor

    Returns:
        NumPy array
    """
    return tensor.detach().cpu().numpy()
