"""
Cox Proportional Hazards model via Newton-Raphson.

Implements Efron's and Breslow's methods for tied event times, for both
one-row-per-subject data and counting-process (start, stop] rows, matching
R's survival::coxph().

Algorithm:
    Initialize β = 0
    For iteration 1..max_iter:
        Compute: partial log-likelihood L(β), score U(β), information I(β)
        β_new = β + I(β)^{-1} @ U(β)
        Check convergence: max|β_new - β| < tol

Risk set at event time t_j:
    R_j = {i : t_j <= stop_i}                    one row per subject
    R_j = {i : start_i < t_j <= stop_i}          counting process

References:
    Cox, D. R. (1972). Regression models and life-tables. JRSS-B, 34(2), 187-220.
    Efron, B. (1977). The efficiency of Cox's likelihood function for
        censored data. JASA, 72(359), 557-565.
    Andersen, P. K. and Gill, R. D. (1982). Cox's regression model for
        counting processes. Annals of Statistics, 10(4), 1100-1120.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from scipy import stats

from pyduration.survival._common import CoxParams


def cox_fit(
    time: NDArray,
    event: NDArray,
    X: NDArray,
    start: NDArray | None = None,
    ties: str = "efron",
    tol: float = 1e-9,
    max_iter: int = 20,
) -> CoxParams:
    """Fit Cox proportional hazards model.

    Parameters
    ----------
    time : NDArray
        (n,) stop time (event or censoring).
    event : NDArray
        (n,) event indicator (1=event, 0=censored).
    X : NDArray
        (n, p) covariate matrix (NO intercept).
    start : NDArray or None
        (n,) entry times for counting-process rows.
    ties : str
        Method for handling tied event times: "efron" (default) or "breslow".
    tol : float
        Convergence tolerance (max absolute change in β).
    max_iter : int
        Maximum Newton-Raphson iterations.

    Returns
    -------
    CoxParams
    """
    n, p = X.shape

    if start is None:
        start = np.full(n, -np.inf)

    order = np.lexsort((event, time))  # ascending time, censored before events
    t_sorted = time[order]
    e_sorted = event[order]
    s_sorted = start[order]
    X_sorted = X[order]

    unique_event_times = np.unique(t_sorted[e_sorted == 1])

    n_events_total = int(np.sum(event))

    if n_events_total == 0:
        return CoxParams(
            coefficients=np.zeros(p, dtype=np.float64),
            hazard_ratios=np.ones(p, dtype=np.float64),
            standard_errors=np.full(p, np.inf),
            z_statistics=np.zeros(p, dtype=np.float64),
            p_values=np.ones(p, dtype=np.float64),
            loglik=(0.0, 0.0),
            concordance=0.5,
            n_events=0,
            n_observations=n,
            n_iter=0,
            converged=True,
            ties=ties,
        )

    args = (t_sorted, s_sorted, e_sorted, X_sorted, unique_event_times, ties)

    # --- Newton-Raphson ---
    beta = np.zeros(p, dtype=np.float64)

    null_loglik = _partial_loglik(beta, *args)

    converged = False
    n_iter = 0
    loglik_old = null_loglik

    for iteration in range(1, max_iter + 1):
        _, score, info_matrix = _score_and_information(beta, *args)

        try:
            step = np.linalg.solve(info_matrix, score)
        except np.linalg.LinAlgError:
            break

        # Limit step size so exp(X @ beta) doesn't overflow
        max_step = np.max(np.abs(step))
        if max_step > 5.0:
            step = step * (5.0 / max_step)

        beta_new = beta + step
        loglik_new = _partial_loglik(beta_new, *args)

        # Step-halving when the likelihood decreases
        halvings = 0
        while loglik_new < loglik_old - 1e-12 and halvings < 10:
            step = step / 2.0
            beta_new = beta + step
            loglik_new = _partial_loglik(beta_new, *args)
            halvings += 1

        if np.max(np.abs(beta_new - beta)) < tol:
            beta = beta_new
            converged = True
            n_iter = iteration
            break

        if iteration > 1 and abs(loglik_new - loglik_old) / (abs(loglik_old) + 0.1) < tol:
            beta = beta_new
            converged = True
            n_iter = iteration
            break

        beta = beta_new
        loglik_old = loglik_new
        n_iter = iteration

    model_loglik = _partial_loglik(beta, *args)

    _, _, info_final = _score_and_information(beta, *args)

    try:
        var_matrix = np.linalg.inv(info_final)
        se = np.sqrt(np.maximum(np.diag(var_matrix), 0.0))
    except np.linalg.LinAlgError:
        se = np.full(p, np.inf)

    z = np.where(se > 0, beta / np.where(se > 0, se, 1.0), 0.0)
    p_values = 2.0 * stats.norm.sf(np.abs(z))

    concordance = _concordance(X @ beta, time, event)

    return CoxParams(
        coefficients=beta,
        hazard_ratios=np.exp(beta),
        standard_errors=se,
        z_statistics=z,
        p_values=p_values,
        loglik=(null_loglik, model_loglik),
        concordance=concordance,
        n_events=n_events_total,
        n_observations=n,
        n_iter=n_iter,
        converged=converged,
        ties=ties,
    )


def _partial_loglik(
    beta: NDArray,
    time: NDArray,
    start: NDArray,
    event: NDArray,
    X: NDArray,
    unique_event_times: NDArray,
    ties: str,
) -> float:
    """Compute partial log-likelihood.

    Parameters
    ----------
    beta : (p,)
    time : (n,) stop times, sorted ascending
    start : (n,) entry times (-inf when not counting process)
    event : (n,) sorted
    X : (n, p) sorted
    unique_event_times : distinct event times
    ties : "efron" or "breslow"
    """
    eta = X @ beta

    # Center eta for numerical stability (cancels in partial likelihood)
    eta_c = eta - (np.max(eta) if len(eta) > 0 else 0.0)
    exp_eta = np.exp(eta_c)

    loglik = 0.0

    for t_j in unique_event_times:
        risk_mask = (time >= t_j) & (start < t_j)
        risk_exp_sum = np.sum(exp_eta[risk_mask])

        event_at_tj = (time == t_j) & (event == 1)
        d_j = int(np.sum(event_at_tj))

        if d_j == 0 or risk_exp_sum <= 0:
            continue

        event_eta_sum = np.sum(eta_c[event_at_tj])

        if ties == "breslow" or d_j == 1:
            loglik += event_eta_sum - d_j * np.log(risk_exp_sum)
        else:
            death_exp_sum = np.sum(exp_eta[event_at_tj])
            for s in range(d_j):
                denom = risk_exp_sum - (s / d_j) * death_exp_sum
                if denom > 0:
                    loglik -= np.log(denom)
            loglik += event_eta_sum

    return loglik


def _score_and_information(
    beta: NDArray,
    time: NDArray,
    start: NDArray,
    event: NDArray,
    X: NDArray,
    unique_event_times: NDArray,
    ties: str,
) -> tuple[float, NDArray, NDArray]:
    """Compute log-likelihood, score vector, and observed information matrix.

    Returns
    -------
    (loglik, score, info_matrix)
        loglik : float
        score : (p,): gradient of log-likelihood
        info_matrix : (p, p): negative Hessian (observed information)
    """
    n, p = X.shape
    eta = X @ beta

    eta_c = eta - (np.max(eta) if n > 0 else 0.0)
    exp_eta = np.exp(eta_c)

    loglik = 0.0
    score = np.zeros(p, dtype=np.float64)
    info_matrix = np.zeros((p, p), dtype=np.float64)

    for t_j in unique_event_times:
        event_at_tj = (time == t_j) & (event == 1)
        d_j = int(np.sum(event_at_tj))

        if d_j == 0:
            continue

        risk_mask = (time >= t_j) & (start < t_j)
        risk_exp = exp_eta[risk_mask]
        risk_X = X[risk_mask]

        S0 = np.sum(risk_exp)
        if S0 <= 0:
            continue
        S1 = risk_X.T @ risk_exp
        S2 = (risk_X * risk_exp[:, np.newaxis]).T @ risk_X

        event_X = X[event_at_tj]
        event_exp = exp_eta[event_at_tj]

        event_X_sum = np.sum(event_X, axis=0)
        event_eta_c_sum = np.sum(eta_c[event_at_tj])

        if ties == "breslow" or d_j == 1:
            loglik += event_eta_c_sum - d_j * np.log(S0)
            score += event_X_sum - d_j * S1 / S0
            info_matrix += d_j * (S2 / S0 - np.outer(S1, S1) / S0**2)
        else:
            death_S0 = np.sum(event_exp)
            death_S1 = event_X.T @ event_exp
            death_S2 = (event_X * event_exp[:, np.newaxis]).T @ event_X

            loglik += event_eta_c_sum

            for s in range(d_j):
                frac = s / d_j
                denom = S0 - frac * death_S0
                if denom <= 0:
                    continue

                mean = (S1 - frac * death_S1) / denom

                loglik -= np.log(denom)
                score -= mean
                info_matrix += (S2 - frac * death_S2) / denom - np.outer(mean, mean)

            score += event_X_sum

    return loglik, score, info_matrix


def _concordance(
    eta: NDArray,
    time: NDArray,
    event: NDArray,
) -> float:
    """Harrell's concordance statistic (C-statistic).

    C = P(risk_i > risk_j | T_i < T_j, event_i = 1)
    """
    concordant = 0
    discordant = 0
    tied_risk = 0

    for i in np.flatnonzero(event == 1):
        later = time > time[i]
        if not later.any():
            continue
        eta_later = eta[later]
        concordant += int(np.sum(eta[i] > eta_later))
        discordant += int(np.sum(eta[i] < eta_later))
        tied_risk += int(np.sum(eta[i] == eta_later))

    total = concordant + discordant + tied_risk
    if total == 0:
        return 0.5

    return (concordant + 0.5 * tied_risk) / total
