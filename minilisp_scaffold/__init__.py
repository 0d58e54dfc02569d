"""Mini-Lisp scaffold generator.

A four-step wizard (operating system, IDE, compiler, build tool) whose
answers constrain each other, and a generator that packs the matching
Mini-Lisp starter project into ``mini_lisp.zip``.
"""

__version__ = "0.1.0"
