from .viewer import Viewer

__all__ = ["Viewer"]
