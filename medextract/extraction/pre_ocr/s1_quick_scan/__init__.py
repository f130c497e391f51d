from .stage import QuickScanStage, QUICK_SCAN_VARIANT

__all__ = ["QuickScanStage", "QUICK_SCAN_VARIANT"]
