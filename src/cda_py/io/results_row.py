"""
Single-line summaries of a CDA analysis for results tables and logs.
"""

from typing import NamedTuple, Optional

from ..types import CDAResult, SignificanceVerdict

RESULTS_COLUMNS = (
    "Image", "p", "Method", "Frame", "Ch1", "Ch2", "Ch3",
    "n", "Area", "M1", "Sig", "M2", "Sig", "R", "Sig",
)


def results_header(log: bool = False) -> str:
    """Header line; comma separated for log output, otherwise tab separated."""
    return ("," if log else "\t").join(RESULTS_COLUMNS)


class ResultsRow(NamedTuple):
    """
    One row of the CDA results table.

    The significance flags are True when the observed value is significantly
    colocated.
    """
    image: str
    p_value: float
    method: str
    frame: int
    channel1: str
    channel2: str
    channel3: str
    n: int
    area: float
    m1: float
    m1_significant: bool
    m2: float
    m2_significant: bool
    r: float
    r_significant: bool

    @classmethod
    def from_result(
        cls,
        result: CDAResult,
        image: str = "",
        method: str = "",
        frame: int = 1,
        channel1: str = "1",
        channel2: str = "2",
        channel3: Optional[str] = None,
    ) -> "ResultsRow":
        """Build a row from an analysis result."""
        if result.unshifted is None:
            raise ValueError("Result has no unshifted measurement")

        def significant(name: str) -> bool:
            summary = result.statistics.get(name)
            return summary is not None and summary.verdict is SignificanceVerdict.SIGNIFICANT_COLOCATED

        observed = result.unshifted
        return cls(
            image=image,
            p_value=result.options.p_value,
            method=method,
            frame=frame,
            channel1=channel1,
            channel2=channel2,
            channel3=channel3 if channel3 is not None else "-",
            n=observed.n,
            area=observed.area,
            m1=observed.m1,
            m1_significant=significant("M1"),
            m2=observed.m2,
            m2_significant=significant("M2"),
            r=observed.r,
            r_significant=significant("R"),
        )

    def format(self, log: bool = False) -> str:
        """Render the row; comma separated for log output, otherwise tab separated."""
        fields = [
            self.image,
            f"{self.p_value:.4f}",
            self.method,
            str(self.frame),
            self.channel1,
            self.channel2,
            self.channel3,
            str(self.n),
            f"{self.area:.2f}%",
            f"{self.m1:.4f}",
            _flag(self.m1_significant),
            f"{self.m2:.4f}",
            _flag(self.m2_significant),
            f"{self.r:.4f}",
            _flag(self.r_significant),
        ]
        return ("," if log else "\t").join(fields)


def _flag(value: bool) -> str:
    return "true" if value else "false"
