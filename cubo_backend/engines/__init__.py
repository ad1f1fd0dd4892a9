"""
Cubo Estratégia calculation engines.

Pure, synchronous modules with no database access:
    - roi: ROI / NPV / IRR / payback formulas
    - chart: impact × complexity matrix transform
    - report: HTML report rendering
"""
