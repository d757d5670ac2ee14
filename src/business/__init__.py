"""
Business Layer - 业务模块层

资金账户考核系统的业务逻辑层，包含：
- challenge: 考核规则、交易记录、爆仓检测、阶段晋级与出金
- cli: 命令行适配层
"""
