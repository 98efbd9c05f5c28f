from typing import List, Optional
from pydantic import BaseModel, Field, model_validator

from .ellipses import Axes, Ellipse
from .packed import compute_size

class ShapeletConfig(BaseModel):
    """
    Configuration for shapelet model building.

    Provides type safety and validation for basis and ellipse parameters.
    """
    # Basis
    order: int = Field(4, ge=0, description="Maximum total order of the shapelet basis.")
    coefficients: Optional[List[float]] = Field(None, description="Packed-order coefficients of an expansion to render.")

    # Ellipse geometry
    x0: Optional[float] = Field(None, description="Center x coordinate. If None, uses image center.")
    y0: Optional[float] = Field(None, description="Center y coordinate. If None, uses image center.")
    a: float = Field(3.0, gt=0.0, description="Semi-major axis of the basis ellipse.")
    b: float = Field(3.0, gt=0.0, description="Semi-minor axis of the basis ellipse.")
    theta: float = Field(0.0, description="Position angle in radians.")

    # Evaluation
    use_approximate_exp: bool = Field(False, description="Use the fast approximate exponential for the Gaussian envelope.")
    dtype: str = Field(default='float64', pattern='^(float32|float64)$', description="Element type of design matrices and model images.")

    @model_validator(mode='after')
    def check_coefficient_length(self):
        if self.coefficients is not None and len(self.coefficients) != compute_size(self.order):
            raise ValueError(
                f"coefficients has {len(self.coefficients)} entries, order {self.order} needs {compute_size(self.order)}"
            )
        return self

    def ellipse(self, image_shape):
        """Basis ellipse for an image of the given (height, width)."""
        h, w = image_shape
        x0 = self.x0 if self.x0 is not None else w / 2.0
        y0 = self.y0 if self.y0 is not None else h / 2.0
        return Ellipse(core=Axes(a=self.a, b=self.b, theta=self.theta), x0=x0, y0=y0)


def load_config(config):
    """Normalize None, a dict, or a ShapeletConfig into a ShapeletConfig."""
    if config is None:
        return ShapeletConfig()
    if isinstance(config, dict):
        return ShapeletConfig(**config)
    return config
