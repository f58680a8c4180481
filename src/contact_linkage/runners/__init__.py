from contact_linkage.runners.local import LocalLinkagePipeline

__all__ = ["LocalLinkagePipeline"]
