from .stage import DeskewDetectorStage

__all__ = ["DeskewDetectorStage"]
