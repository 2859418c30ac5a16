"""
配置 Schema 定义

使用 Pydantic 定义严格的 YAML 配置模型，支持验证和类型检查。
"""

from __future__ import annotations

import re
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class Arch(str, Enum):
    """目标架构枚举"""
    IA32 = "ia32"
    X64 = "x64"
    ARMV7L = "armv7l"
    ARM64 = "arm64"


class ProductModel(BaseModel):
    """产品信息模型"""
    name: str = Field(..., description="产品名称", min_length=1, max_length=100)
    version: str = Field(..., description="版本号", min_length=1, max_length=20)
    product_filename: Optional[str] = Field(
        None,
        description="主程序文件名（不含 .exe），默认与产品名称相同",
        max_length=100,
    )
    company: Optional[str] = Field(None, description="公司名称", max_length=100)

    @field_validator('version')
    @classmethod
    def validate_version(cls, v: str) -> str:
        """验证版本号格式"""
        patterns = [
            r'^\d+\.\d+\.\d+(?:-[\w\-\.]+)?$',  # 标准 SemVer
            r'^\d+\.\d+$',                      # 简单两段式
            r'^\d+\.\d+\.\d+\.\d+$',           # 四段式
        ]

        for pattern in patterns:
            if re.match(pattern, v):
                return v

        raise ValueError("版本号格式不正确，支持格式：1.0.0（SemVer）、1.0、1.0.0.0")

    @field_validator('product_filename')
    @classmethod
    def validate_product_filename(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        if any(char in v for char in '<>:"/\\|?*'):
            raise ValueError("主程序文件名包含非法字符")
        return v

    def get_main_exe_file_name(self) -> str:
        """主程序文件名，会从生成的组件中排除"""
        return f"{self.product_filename or self.name}.exe"


class BuildModel(BaseModel):
    """构建输入输出配置"""
    app_dir: Path = Field(..., description="已打包好的应用目录")
    output_dir: Path = Field(Path("dist"), description="安装包输出目录")
    archs: List[Arch] = Field(default_factory=lambda: [Arch.X64], description="目标架构列表", min_length=1)
    fail_fast: bool = Field(True, description="某个架构构建失败后是否停止后续架构")

    @field_validator('archs')
    @classmethod
    def validate_archs(cls, v: List[Arch]) -> List[Arch]:
        """去除重复架构，保持原有顺序"""
        unique: List[Arch] = []
        for arch in v:
            if arch not in unique:
                unique.append(arch)
        return unique


class WixModel(BaseModel):
    """WiX 工具链附加参数"""
    artifact_name: str = Field(
        "${productName} ${version}.${ext}",
        description="安装包文件名模板",
        min_length=1,
    )
    candle_files: List[Path] = Field(default_factory=list, description="额外传给 candle.exe 的源文件")
    candle_flags: List[str] = Field(default_factory=list, description="额外传给 candle.exe 的参数")
    light_files: List[Path] = Field(default_factory=list, description="额外传给 light.exe 的目标文件")
    light_flags: List[str] = Field(default_factory=list, description="额外传给 light.exe 的参数")


class ToolchainModel(BaseModel):
    """工具链执行配置"""
    wix_dir: Optional[Path] = Field(None, description="WiX 工具所在目录，为空时从 PATH 查找")
    wine_binary: str = Field("wine", description="非 Windows 主机上使用的 Wine 可执行文件", min_length=1)
    timeout_sec: Optional[int] = Field(None, description="单次工具调用超时时间（秒）", ge=1, le=7200)
    candle_jobs: int = Field(1, description="candle.exe 并行数", ge=1, le=32)


class SigningModel(BaseModel):
    """签名配置"""
    command: Optional[str] = Field(None, description="签名工具，例如 signtool.exe")
    args: List[str] = Field(
        default_factory=lambda: ["sign", "/a", "${file}"],
        description="签名参数，${file} 会被替换为安装包路径",
    )


class ConfigModel(BaseModel):
    """配置元信息模型"""
    version: int = Field(1, description="配置 schema 版本", ge=1)

    @field_validator('version')
    @classmethod
    def validate_config_version(cls, v: int) -> int:
        """验证配置版本"""
        SUPPORTED_VERSIONS = [1]
        if v not in SUPPORTED_VERSIONS:
            raise ValueError(f"不支持的配置版本 {v}，支持的版本: {SUPPORTED_VERSIONS}")
        return v


class MsiPackConfig(BaseModel):
    """msipack 主配置模型

    这是整个配置文件的根模型，包含所有配置部分。
    """

    config: ConfigModel = Field(default_factory=ConfigModel, description="配置元信息")

    # 必填部分
    product: ProductModel = Field(..., description="产品信息")
    build: BuildModel = Field(..., description="构建配置")

    # 可选部分
    wix: WixModel = Field(default_factory=WixModel, description="WiX 配置")
    toolchain: ToolchainModel = Field(default_factory=ToolchainModel, description="工具链配置")
    signing: SigningModel = Field(default_factory=SigningModel, description="签名配置")

    model_config = {
        "extra": "forbid",
        "validate_assignment": True,
        "str_strip_whitespace": True,
    }

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式"""
        data = self.model_dump(exclude_none=True, by_alias=True)

        # 转换 Path 对象和枚举为字符串
        def convert_values(obj):
            if isinstance(obj, dict):
                return {k: convert_values(v) for k, v in obj.items()}
            elif isinstance(obj, list):
                return [convert_values(item) for item in obj]
            elif isinstance(obj, Enum):
                return obj.value
            elif isinstance(obj, Path):
                return str(obj)
            else:
                return obj

        return convert_values(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MsiPackConfig':
        """从字典创建配置实例"""
        return cls.model_validate(data)
