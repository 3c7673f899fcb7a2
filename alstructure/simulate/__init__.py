from ._admix import admix_geno, SimulatedAdmixture

__all__ = ["admix_geno", "SimulatedAdmixture"]
