"""Import pipeline."""

from jirabridge.importer.pipeline import ImportPipeline, build_description, build_task_draft
from jirabridge.importer.progress import ImportProgress, NullImportProgress

__all__ = ["ImportPipeline", "ImportProgress", "NullImportProgress", "build_description", "build_task_draft"]
