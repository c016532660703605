"""Shared test configuration, fixtures and pytest markers."""

import pytest

from config import create_custom_config

SAMPLE_RESUME = """
张三
手机：13812345678
邮箱：zhangsan@example.com
地址：北京市海淀区中关村大街1号

求职意向：软件工程师

教育背景：
2018年9月-2022年6月  清华大学  计算机科学与技术  本科
GPA: 3.8/4.0
获得校级奖学金

工作经历：
2022年7月-至今  北京字节跳动科技有限公司  Java开发工程师
负责后端服务开发，使用Spring Boot、MySQL、Redis等技术
优化系统性能，响应时间提升30%

项目经历：
在线教育平台
2022年3月-2022年6月
使用Vue.js、Spring Boot、MySQL开发
实现用户管理、课程管理、在线考试等功能
服务1000+用户，获得良好反馈

技能：
编程语言：Java、Python、JavaScript
框架：Spring Boot、Vue.js、React
数据库：MySQL、Redis、MongoDB
工具：Git、Docker、Maven

语言能力：
英语：CET-6，能够熟练阅读英文技术文档

证书：
Java程序员认证（Oracle）2023年
"""


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: builds very large inputs to exercise deadlines"
    )


@pytest.fixture
def sample_resume() -> str:
    return SAMPLE_RESUME


@pytest.fixture
def rule_config():
    """Default preset with AI assistance switched off."""
    return create_custom_config(enable_ai_assistance=False)


@pytest.fixture
def ai_config():
    return create_custom_config(enable_ai_assistance=True, max_retries=1)
