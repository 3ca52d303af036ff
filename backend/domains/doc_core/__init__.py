"""
Doc Core - 文档存储基础设施

提供与具体实体无关的文档存储组件:
- base: DocumentStore 接口、共享数据库句柄、JSONB 实现
- database: JSONB 查询构建器
- logging: structlog 日志配置

注意: 通用应用基础设施（异常、生命周期）在 domains.core 模块中。
"""
