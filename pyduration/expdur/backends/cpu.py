"""
CPU backends for expected durations.

CPUNPSFBackend: nonparametric step function engine.
CPUGAMBackend: rank regression engine.

Both take an ExpDurDesign and return Result[EngineParams]. The bootstrap
driver calls ``solve`` once per resample with a derived design.
"""

from __future__ import annotations

from pyduration.core.result import Result
from pyduration.core.compute.timing import Timer
from pyduration.expdur._common import EngineParams
from pyduration.expdur._gam import gam_fit
from pyduration.expdur._npsf import npsf_fit
from pyduration.expdur.design import ExpDurDesign


class CPUNPSFBackend:
    """CPU backend for the NPSF method."""

    @property
    def name(self) -> str:
        return 'cpu_npsf'

    def solve(self, design: ExpDurDesign) -> Result[EngineParams]:
        """Estimate the baseline and expected durations."""
        timer = Timer()
        timer.start()

        with timer.section('npsf'):
            params = npsf_fit(design)

        timer.stop()

        return Result(
            params=params,
            info={
                'method': 'npsf',
                'n_times': len(params.baseline),
                'n_targets': len(params.exp_dur),
                'by_subject': params.subject_ids is not None,
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=(),
        )


class CPUGAMBackend:
    """CPU backend for the GAM method."""

    @property
    def name(self) -> str:
        return 'cpu_gam'

    def solve(self, design: ExpDurDesign) -> Result[EngineParams]:
        """Fit the rank-to-duration curve and predict expected durations."""
        timer = Timer()
        timer.start()

        with timer.section('gam'):
            params = gam_fit(design)

        timer.stop()

        warnings_list = []
        if params.n_out_of_range:
            warnings_list.append(
                f"{params.n_out_of_range} linear predictor value(s) outside the "
                f"training range; predictions use the boundary rank"
            )

        return Result(
            params=params,
            info={
                'method': 'gam',
                'k': design.k,
                'n_targets': len(params.exp_dur),
                'n_out_of_range': params.n_out_of_range,
                'by_subject': params.subject_ids is not None,
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )
