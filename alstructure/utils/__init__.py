from ._stats import rmse, align_components, binomial_loglik

__all__ = ["rmse", "align_components", "binomial_loglik"]
