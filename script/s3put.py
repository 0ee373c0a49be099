#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
S3文件上传工具启动脚本

用法：python script/s3put.py <bucket> <dirpath> <source>
例如：python script/s3put.py my-s3bucket foo bar.txt
会把 ./bar.txt 上传到 s3://my-s3bucket/foo/bar.txt
"""

import sys
import os
import time
import traceback
import argparse
from dotenv import load_dotenv

# 加载.env文件
load_dotenv()

# 添加项目根目录到Python路径
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from log.logger import logger
from log.upload_logger import upload_logger
from core.exceptions import S3PutError
from core.models import UploadTarget
from core.s3_uploader import S3Uploader

USAGE = "Usage: ./s3put.py <bucket> <dirpath> <source>"


def build_parser():
    parser = argparse.ArgumentParser(description="使用实例角色临时凭证上传文件到S3", usage=USAGE)
    parser.add_argument('bucket', nargs='?', help='桶名称')
    parser.add_argument('dirpath', nargs='?', help='目标目录')
    parser.add_argument('source', nargs='?', help='本地源文件')
    parser.add_argument('--log-level', default=None, help='日志级别，覆盖配置文件')
    return parser


def report_summary():
    """在日志中输出本次运行的上传汇总"""
    summary = upload_logger.get_summary()
    logger.info(f"上传汇总：成功{summary['success']}个，失败{summary['failed']}个", module="main")
    for item in summary['failed_list']:
        logger.info(f"失败：s3://{item['bucket']}/{item['object_path']}，错误：{item['error_msg']}", module="main")
    return summary


def main(argv=None):
    """
    主函数

    Returns:
        int: 退出码
    """
    args = build_parser().parse_args(argv)

    if args.log_level:
        logger.set_level(args.log_level)

    if not args.bucket or not args.dirpath or not args.source:
        print("Missing parameters.")
        print(USAGE)
        return 1
    if not os.path.isfile(args.source):
        print(f"{args.source} doesn't exist.")
        return 1

    object_path = UploadTarget.from_paths(args.bucket, args.dirpath, args.source).object_path
    start_time = time.time()
    uploader = S3Uploader()
    try:
        result = uploader.upload(args.bucket, args.dirpath, args.source)
        upload_logger.log_upload(args.bucket, result.object_path, args.source, result.file_size,
                                 time.time() - start_time, "success")
        print(f"已上传：{args.source} -> s3://{args.bucket}/{result.object_path}")
        return 0

    except S3PutError as e:
        logger.error(f"上传失败：{str(e)}", module="main")
        upload_logger.log_upload(args.bucket, object_path, args.source, None,
                                 time.time() - start_time, "failed", str(e))
        print(f"错误：{type(e).__name__}: {str(e)}")
        return 1

    except Exception as e:
        logger.critical(f"上传发生致命错误：{str(e)}", module="main")
        logger.critical(traceback.format_exc(), module="main")
        upload_logger.log_upload(args.bucket, object_path, args.source, None,
                                 time.time() - start_time, "failed", f"{type(e).__name__}: {str(e)}")
        print(f"错误：上传发生致命错误：{str(e)}")
        print("详细错误信息请查看日志文件")
        return 1

    finally:
        uploader.close()
        report_summary()


if __name__ == "__main__":
    sys.exit(main())
