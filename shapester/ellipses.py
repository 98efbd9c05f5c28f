import numpy as np
from pydantic import BaseModel, ConfigDict, Field


class Axes(BaseModel):
    """
    Ellipse shape as semi-axes and position angle.

    The position angle is in radians, counter-clockwise from the x axis,
    the same convention as isophote geometries.
    """
    model_config = ConfigDict(frozen=True)

    a: float = Field(..., gt=0.0, description="Semi-major axis length.")
    b: float = Field(..., gt=0.0, description="Semi-minor axis length.")
    theta: float = Field(0.0, description="Position angle in radians.")

    @classmethod
    def from_geometry(cls, sma, eps, pa):
        """Build from semi-major axis, ellipticity (1 - b/a) and position angle."""
        return cls(a=sma, b=sma * (1.0 - eps), theta=pa)

    def get_grid_transform(self):
        """
        Linear transform from pixel offsets to the ellipse's unit-circle frame.

        Rotates by -theta, then divides by the semi-axes:

            xt = ( dx cos(theta) + dy sin(theta)) / a
            yt = (-dx sin(theta) + dy cos(theta)) / b
        """
        cos_t, sin_t = np.cos(self.theta), np.sin(self.theta)
        return np.array([
            [cos_t / self.a, sin_t / self.a],
            [-sin_t / self.b, cos_t / self.b],
        ])

    @property
    def determinant(self):
        """Determinant of the grid transform, 1 / (a b)."""
        return 1.0 / (self.a * self.b)

    @property
    def area(self):
        return np.pi * self.a * self.b

    def scaled(self, factor):
        return Axes(a=self.a * factor, b=self.b * factor, theta=self.theta)


class Ellipse(BaseModel):
    """An ellipse shape plus a center position."""
    model_config = ConfigDict(frozen=True)

    core: Axes
    x0: float = Field(0.0, description="Center x coordinate.")
    y0: float = Field(0.0, description="Center y coordinate.")

    @property
    def center(self):
        return self.x0, self.y0
