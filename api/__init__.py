"""
JS Bundle API

模块使用采集与 bundle 构建服务
"""

__version__ = "1.0.0"
