import logging
import os
import sys
from logging.handlers import RotatingFileHandler

import colorama

# 全局标志，控制是否禁用 colorama
_no_colorama = False

def set_no_colorama(value: bool):
    """设置是否禁用 colorama"""
    global _no_colorama
    if value and not _no_colorama:
        colorama.deinit()
    _no_colorama = value

# 👇 启用 colorama 以支持 Windows 颜色显示
colorama.init()


# 彩色日志格式化器（仅在终端启用颜色）
class ColoredFormatter(logging.Formatter):
    COLORS = {
        'DEBUG': '\033[90m',      # 灰色
        'INFO': '\033[38;2;243;238;210m',  # 浅紫色 #f3eed2
        'SUCCESS': '\033[92m',    # 绿色
        'WARNING': '\033[93m',    # 黄色
        'ERROR': '\033[91m',      # 红色
        'CRITICAL': '\033[41m',   # 红底白字
        'WHITE': '\033[97m',      # 白色
        'RESET': '\033[0m'
    }

    def __init__(self, fmt, datefmt=None, style='%'):
        super().__init__(fmt, datefmt, style)
        # 仅当输出到终端时启用颜色
        self.use_color = sys.stdout.isatty()

    def format(self, record):
        message = record.getMessage()
        asctime = self.formatTime(record, self.datefmt)

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)

        if self.use_color:
            color = self.COLORS.get(record.levelname, self.COLORS['INFO'])
            white = self.COLORS['WHITE']
            reset = self.COLORS['RESET']
            # 月-日 时:分:秒（白色） [模块（颜色取决于level）] 正文
            formatted = f"{white}{asctime}{reset} {color}[{record.name}]{reset} {message}"
        else:
            formatted = f"{asctime} [{record.name}] {message}"

        if record.exc_text:
            formatted = f"{formatted}\n{record.exc_text}"
        return formatted


# 定义日志格式
LOG_FORMAT = '%(asctime)s %(name)s %(message)s'
DATE_FORMAT = '%m-%d %H:%M:%S'

# 创建日志目录
LOG_DIR = os.environ.get('IGNORE_SPACE_LOG_DIR', 'logs')
os.makedirs(LOG_DIR, exist_ok=True)

# 控制台处理器（带颜色）
console_handler = logging.StreamHandler(sys.stdout)
console_handler.setFormatter(ColoredFormatter(LOG_FORMAT, DATE_FORMAT))

# 文件处理器（无颜色，纯文本，轮转）
file_handler = RotatingFileHandler(
    os.path.join(LOG_DIR, 'app.log'),
    maxBytes=1024 * 1024 * 5,  # 5MB
    backupCount=5,
    encoding='utf-8'
)
file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))

# 根日志记录器保持DEBUG，具体级别由各logger控制
DEFAULT_LOG_LEVEL = logging.DEBUG

logging.basicConfig(
    level=DEFAULT_LOG_LEVEL,
    handlers=[console_handler, file_handler]
)

# 日志级别映射
LOG_LEVEL_MAP = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
    'CRITICAL': logging.CRITICAL
}

# 当前配置的日志级别，由 set_log_level 在加载配置后更新
_configured_level = logging.INFO

# 通过 get_logger 创建的日志记录器名称
_managed_loggers = set()


def _configure_third_party_loggers():
    """配置第三方库的日志级别，避免大量debug日志输出"""
    for name in ('asyncio', 'yaml'):
        logging.getLogger(name).setLevel(logging.WARNING)

_configure_third_party_loggers()

# 注册 SUCCESS 级别（介于 INFO 和 WARNING 之间）
SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

# 为 Logger 类动态添加 .success() 方法
def success(self, message, *args, **kwargs):
    if self.isEnabledFor(SUCCESS):
        self._log(SUCCESS, message, args, **kwargs)

logging.Logger.success = success


def set_log_level(level) -> int:
    """
    设置所有受管日志记录器的级别
    :param level: 级别名称（如 'DEBUG'）或 logging 级别数值
    :return: 实际生效的级别数值
    """
    global _configured_level
    if isinstance(level, str):
        level = LOG_LEVEL_MAP.get(level.upper(), logging.INFO)
    _configured_level = level
    for name in _managed_loggers:
        logging.getLogger(name).setLevel(level)
    return level


# 公共接口函数
def get_logger(name: str) -> logging.Logger:
    """
    获取指定名称的日志记录器，并应用配置的日志级别
    :param name: 日志记录器名称
    :return: 日志记录器实例
    """
    logger = logging.getLogger(name)
    logger.setLevel(_configured_level)
    _managed_loggers.add(name)
    return logger


def log_exception(logger: logging.Logger, message: str, e: Exception, level: str = 'error', show_traceback: bool = False):
    """
    统一记录异常信息
    :param logger: 日志记录器
    :param message: 自定义消息
    :param e: 异常对象
    :param level: 日志级别 (debug/info/warning/error/critical)
    :param show_traceback: 是否显示完整堆栈跟踪，默认False避免控制台刷屏
    """
    log_func = getattr(logger, level.lower(), logger.error)  # 防止非法 level
    log_func(f"{message}: {type(e).__name__}: {str(e)}", exc_info=show_traceback)
