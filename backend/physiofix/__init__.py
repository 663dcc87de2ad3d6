"""PhysioFix motion core: pose stream in, reps, form feedback and safety alerts out."""

__version__ = "1.0.0"
