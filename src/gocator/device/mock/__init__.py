from .simulated_profile import random_sample_profile, simulate_profile

__all__ = ["random_sample_profile", "simulate_profile"]
