"""指标注册表与 Pushgateway 推送客户端。"""
