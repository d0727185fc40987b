"""Production image build and export pipeline."""

from .pipeline import BuildPhase, BuildRequest, BuildSession, ProductionBuildPipeline

__all__ = ["BuildPhase", "BuildRequest", "BuildSession", "ProductionBuildPipeline"]
