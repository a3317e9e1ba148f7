"""
Greeks result types.
"""

from dataclasses import dataclass, field

import numpy as np

from sde_mc.config import DEFAULT_CONFIDENCE_Z


@dataclass(frozen=True)
class GreekResult:
    """
    Container for a single Greek estimate.

    Attributes
    ----------
    greek : str
        Sensitivity name ('delta', 'gamma', 'vega', 'rho' or a parameter name)
    value : float
        Estimated Greek value
    standard_error : float
        Standard error of the estimate
    ci_lower : float
        Lower bound of 95% confidence interval
    ci_upper : float
        Upper bound of 95% confidence interval
    method : str
        'pathwise' or 'finite_difference'
    bump : float | None
        Bump size h (None for purely pathwise estimates)
    n_samples : int
        Number of per-path samples behind the estimate
    """

    greek: str
    value: float
    standard_error: float
    ci_lower: float
    ci_upper: float
    method: str
    bump: float | None = None
    n_samples: int = 0

    @classmethod
    def from_samples(
        cls,
        greek: str,
        samples: np.ndarray,
        method: str,
        bump: float | None = None
    ) -> "GreekResult":
        """
        Summarize per-path Greek samples.

        Parameters
        ----------
        samples : np.ndarray
            Individual Greek estimates from simulation paths
        """
        n = len(samples)
        value = float(np.mean(samples))
        stderr = float(np.std(samples, ddof=1) / np.sqrt(n)) if n > 1 else float("nan")

        z_critical = DEFAULT_CONFIDENCE_Z
        return cls(
            greek=greek,
            value=value,
            standard_error=stderr,
            ci_lower=value - z_critical * stderr,
            ci_upper=value + z_critical * stderr,
            method=method,
            bump=bump,
            n_samples=n,
        )

    def __repr__(self) -> str:
        base = (
            f"GreekResult(\n"
            f"  greek='{self.greek}',\n"
            f"  value={self.value:.6f},\n"
            f"  stderr={self.standard_error:.6f},\n"
            f"  CI95=[{self.ci_lower:.6f}, {self.ci_upper:.6f}],\n"
            f"  method='{self.method}'"
        )
        if self.bump is not None:
            base += f",\n  bump={self.bump:.6g}"
        base += "\n)"
        return base


@dataclass
class GreeksResult:
    """
    Container for several Greek estimates computed with one method.

    Attributes
    ----------
    method : str
        Estimation method used
    greeks : dict[str, GreekResult]
        Estimates keyed by Greek name, in request order
    """

    method: str
    greeks: dict[str, GreekResult] = field(default_factory=dict)

    def __getitem__(self, name: str) -> GreekResult:
        return self.greeks[name]

    def __contains__(self, name: str) -> bool:
        return name in self.greeks

    def __repr__(self) -> str:
        lines = [f"GreeksResult(method='{self.method}')"]
        for name, result in self.greeks.items():
            lines.append(f"  {name.capitalize()}: {result.value:.6f} ± {result.standard_error:.6f}")
        return "\n".join(lines)
