"""StableSurge hook math for Balancer V3 stable pools.

The surge hook replaces the static swap fee by a dynamic one whenever a
swap pushes the pool's imbalance above a threshold and makes it worse:

    imbalance = sum(|b_i - median(b)|) / sum(b)
    fee = static + (max - static) * (imbalance - threshold) / (1 - threshold)

Exact-in swaps preview the swap with the full input, price the fee off the
previewed balances, then re-run the swap with the fee-adjusted input.
Exact-out swaps price the fee off the base swap and gross the input up by
1 / (1 - fee) once, without iterating to a fixed point.
"""

from __future__ import annotations

from dataclasses import dataclass

from baseline_solver.math.fixed_point import ONE_18, Bfp

from .stable_math import stable_calc_in_given_out, stable_calc_out_given_in


@dataclass(frozen=True)
class SurgeSwapResult:
    """Amount computed by a surge swap and the fee that was applied."""

    amount: Bfp
    effective_fee: Bfp


def find_median(balances: list[Bfp]) -> Bfp:
    """Median balance; even-length lists average the middle two (rounded down)."""
    ordered = sorted(b.value for b in balances)
    mid = len(ordered) // 2
    if len(ordered) % 2 == 0:
        return Bfp((ordered[mid - 1] + ordered[mid]) // 2)
    return Bfp(ordered[mid])


def calculate_imbalance(balances: list[Bfp]) -> Bfp:
    """Total distance from the median as a share of the total balance."""
    median = find_median(balances)
    total_balance = Bfp(0)
    total_diff = Bfp(0)
    for balance in balances:
        total_balance = total_balance.add(balance)
        total_diff = total_diff.add(Bfp(abs(balance.value - median.value)))

    if total_balance.value == 0:
        return Bfp(0)
    return total_diff.div_down(total_balance)


def get_surge_fee(
    balances: list[Bfp],
    new_balances: list[Bfp],
    static_fee: Bfp,
    surge_threshold: Bfp,
    max_surge_fee: Bfp,
) -> Bfp:
    """Effective fee for a swap moving the pool from `balances` to `new_balances`.

    The result always lies in [static_fee, max_surge_fee].
    """
    new_imbalance = calculate_imbalance(new_balances)
    if new_imbalance.value == 0:
        return static_fee

    old_imbalance = calculate_imbalance(balances)
    if new_imbalance <= old_imbalance or new_imbalance <= surge_threshold:
        return static_fee

    excess = new_imbalance.sub(surge_threshold).div_down(surge_threshold.complement())
    return static_fee.add(max_surge_fee.sub(static_fee).mul_down(excess))


def calc_out_given_in_with_surge(
    amp: int,
    balances: list[Bfp],
    token_index_in: int,
    token_index_out: int,
    amount_in: Bfp,
    static_fee: Bfp,
    surge_threshold: Bfp,
    max_surge_fee: Bfp,
) -> SurgeSwapResult:
    """Exact-in swap with the surge fee taken from the input.

    `amount_in` is the scaled gross input; no fee has been deducted yet.
    """
    preview_out = stable_calc_out_given_in(amp, balances, token_index_in, token_index_out, amount_in)

    new_balances = list(balances)
    new_balances[token_index_in] = balances[token_index_in].add(amount_in)
    new_balances[token_index_out] = balances[token_index_out].sub(preview_out)

    fee = get_surge_fee(balances, new_balances, static_fee, surge_threshold, max_surge_fee)
    amount_in_after_fee = amount_in.sub(amount_in.mul_up(fee))

    amount_out = stable_calc_out_given_in(
        amp, balances, token_index_in, token_index_out, amount_in_after_fee
    )
    return SurgeSwapResult(amount=amount_out, effective_fee=fee)


def calc_in_given_out_with_surge(
    amp: int,
    balances: list[Bfp],
    token_index_in: int,
    token_index_out: int,
    amount_out: Bfp,
    static_fee: Bfp,
    surge_threshold: Bfp,
    max_surge_fee: Bfp,
) -> SurgeSwapResult:
    """Exact-out swap; the returned amount includes the surge fee."""
    base_in = stable_calc_in_given_out(amp, balances, token_index_in, token_index_out, amount_out)

    new_balances = list(balances)
    new_balances[token_index_in] = balances[token_index_in].add(base_in)
    new_balances[token_index_out] = balances[token_index_out].sub(amount_out)

    fee = get_surge_fee(balances, new_balances, static_fee, surge_threshold, max_surge_fee)
    amount_in = base_in.div_up(Bfp(ONE_18).sub(fee))
    return SurgeSwapResult(amount=amount_in, effective_fee=fee)
