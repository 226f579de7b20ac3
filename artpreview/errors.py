"""
Error handling for the art preview compositor.

Provides specific exception types for the few failure modes the preview
pipeline recognizes, with context for debugging and user feedback.
"""

from typing import Dict, List, Any


class ArtPreviewError(Exception):
    """Base exception for all art preview errors."""

    def __init__(self, message: str, details: Dict[str, Any] = None, suggestions: List[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.suggestions = suggestions or []

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for JSON serialization."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'details': self.details,
            'suggestions': self.suggestions
        }


class ValidationError(ArtPreviewError):
    """Raised when a selection value or geometry input is invalid."""
    pass


class ConfigurationError(ArtPreviewError):
    """Raised when configuration is invalid or missing."""
    pass


class RenderError(ArtPreviewError):
    """Raised when drawing a preview frame fails."""
    pass


class AssetError(RenderError):
    """Raised when an image asset cannot be used."""
    pass


class AssetUnavailableError(AssetError):
    """Raised inside the image loader when a source cannot be fetched or decoded.

    The loader converts this into a missing layer; it never reaches a redraw.
    """

    def __init__(self, source: str, reason: str):
        super().__init__(
            f"Image asset unavailable: {source}",
            details={
                'source': source,
                'reason': reason
            },
            suggestions=[
                "Check that the asset path or URL is spelled correctly",
                "Verify the assets directory path in settings.yaml",
                "Ensure the file is a readable PNG or JPEG image"
            ]
        )


class UnknownColorTreatmentError(ValidationError):
    """Raised when a color treatment name is not one of the known recipes."""

    def __init__(self, name: str, known: List[str]):
        super().__init__(
            f"Unknown color treatment: {name}",
            details={
                'name': name,
                'known_treatments': known
            },
            suggestions=[f"Use one of: {', '.join(known)}"]
        )


class SceneIndexError(ValidationError):
    """Raised when the active scene index is outside the scene list."""

    def __init__(self, index: int, scene_count: int):
        super().__init__(
            f"Scene index {index} out of range (0..{scene_count - 1})",
            details={
                'index': index,
                'scene_count': scene_count
            },
            suggestions=["Pick a scene from the thumbnail strip"]
        )


class EmptyCatalogError(ConfigurationError):
    """Raised when the catalog defines no usable scenes."""

    def __init__(self, catalog_path: str):
        super().__init__(
            f"Catalog defines no scenes: {catalog_path}",
            details={'catalog_path': catalog_path},
            suggestions=[
                "Add at least one entry under 'scenes' in catalog.yaml",
                "Check the log for scene entries that failed validation"
            ]
        )


def create_error_recovery_suggestions(error: Exception, context: Dict[str, Any] = None) -> List[str]:
    """Generate contextual recovery suggestions for any error."""
    suggestions = []

    if isinstance(error, ArtPreviewError):
        suggestions.extend(error.suggestions)

    if context:
        if context.get('missing_assets', 0) > 0:
            suggestions.append("Check that frame, mask and background assets are available")

        if context.get('invalid_scenes', 0) > 0:
            suggestions.append("Fix the scene entries reported in the log")

    if not suggestions:
        suggestions = [
            "Check the configuration files in the config directory",
            "Contact support if the problem persists"
        ]

    return suggestions
