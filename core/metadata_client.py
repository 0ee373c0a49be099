#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
实例元数据客户端模块
从EC2实例元数据服务获取区域、账号和角色临时凭证
"""

import requests
from core.exceptions import CredentialResolutionError
from core.models import Credentials, InstanceMetadata
from log.logger import logger
from config.config_loader import config_loader

IDENTITY_DOCUMENT_PATH = 'latest/dynamic/instance-identity/document'
IAM_INFO_PATH = 'latest/meta-data/iam/info'
SECURITY_CREDENTIALS_PATH = 'latest/meta-data/iam/security-credentials/'
TOKEN_PATH = 'latest/api/token'


class InstanceMetadataClient:
    """实例元数据客户端类"""

    def __init__(self, endpoint=None, timeout=None, use_token=None, role_name=None, session=None):
        """
        初始化元数据客户端

        Args:
            endpoint (str, optional): 元数据服务地址，默认取配置
            timeout (float, optional): 请求超时（秒）
            use_token (bool, optional): 是否先获取IMDSv2会话令牌
            role_name (str, optional): 指定角色名，为空时从实例配置文件ARN推导
            session (requests.Session, optional): 复用的HTTP会话
        """
        metadata_config = config_loader.get_metadata_config()

        self.endpoint = (endpoint or metadata_config.get('endpoint', 'http://169.254.169.254')).rstrip('/')
        self.timeout = timeout if timeout is not None else metadata_config.get('timeout', 2)
        self.use_token = use_token if use_token is not None else metadata_config.get('use_token', False)
        self.token_ttl = metadata_config.get('token_ttl', 21600)
        self.role_name = role_name or metadata_config.get('role_name') or None

        self.session = session or requests.Session()
        self._token = None

        logger.debug(f"元数据客户端已初始化，endpoint：{self.endpoint}，IMDSv2：{self.use_token}", module="metadata_client")

    def _url(self, path):
        return f"{self.endpoint}/{path}"

    def _fetch_token(self):
        """获取IMDSv2会话令牌"""
        try:
            response = self.session.put(
                self._url(TOKEN_PATH),
                headers={'X-aws-ec2-metadata-token-ttl-seconds': str(self.token_ttl)},
                timeout=self.timeout
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise CredentialResolutionError(f"获取元数据会话令牌失败：{e}", step="metadata_token") from e
        return response.text.strip()

    def _get(self, path, step):
        """发送GET请求，失败时抛出CredentialResolutionError"""
        headers = {}
        if self.use_token:
            if self._token is None:
                self._token = self._fetch_token()
            headers['X-aws-ec2-metadata-token'] = self._token

        url = self._url(path)
        try:
            response = self.session.get(url, headers=headers, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.error(f"元数据请求失败：{url}，错误：{str(e)}", module="metadata_client")
            raise CredentialResolutionError(f"元数据服务请求失败：{url}，错误：{e}", step=step) from e
        return response

    def _get_json(self, path, step):
        response = self._get(path, step)
        try:
            data = response.json()
        except ValueError as e:
            raise CredentialResolutionError(f"元数据返回内容不是合法JSON：{path}", step=step) from e
        if not isinstance(data, dict):
            raise CredentialResolutionError(f"元数据返回内容格式错误：{path}", step=step)
        return data

    @staticmethod
    def _require(data, field, step):
        value = data.get(field)
        if not isinstance(value, str) or not value.strip():
            raise CredentialResolutionError(f"元数据缺少字段：{field}", step=step)
        return value.strip()

    def get_identity_document(self):
        """
        获取实例身份文档

        Returns:
            dict: 包含region、accountId等字段
        """
        return self._get_json(IDENTITY_DOCUMENT_PATH, "identity_document")

    def get_instance_profile_arn(self):
        data = self._get_json(IAM_INFO_PATH, "iam_info")
        return self._require(data, 'InstanceProfileArn', "iam_info")

    @staticmethod
    def role_name_from_arn(instance_profile_arn):
        """
        从实例配置文件ARN中提取名称

        Args:
            instance_profile_arn (str): 如 arn:aws:iam::123456789012:instance-profile/my-role

        Returns:
            str: instance-profile/之后的部分
        """
        marker = 'instance-profile/'
        if marker not in instance_profile_arn:
            raise CredentialResolutionError(f"实例配置文件ARN格式错误：{instance_profile_arn}", step="iam_info")
        role_name = instance_profile_arn.split(marker, 1)[1].strip('/')
        if not role_name:
            raise CredentialResolutionError(f"实例配置文件ARN中缺少名称：{instance_profile_arn}", step="iam_info")
        return role_name

    def get_role_credentials(self, role_name, region):
        """
        获取角色临时凭证

        Args:
            role_name (str): 角色名
            region (str): 区域

        Returns:
            Credentials: 临时凭证
        """
        step = "security_credentials"
        data = self._get_json(f"{SECURITY_CREDENTIALS_PATH}{role_name}", step)
        return Credentials(
            access_key_id=self._require(data, 'AccessKeyId', step),
            secret_access_key=self._require(data, 'SecretAccessKey', step),
            session_token=self._require(data, 'Token', step),
            region=region
        )

    def resolve(self):
        """
        依次获取区域、账号、角色和临时凭证

        Returns:
            InstanceMetadata: 实例元数据

        Raises:
            CredentialResolutionError: 任一步骤失败
        """
        document = self.get_identity_document()
        region = self._require(document, 'region', "identity_document")
        account_id = self._require(document, 'accountId', "identity_document")

        instance_profile_arn = self.get_instance_profile_arn()
        role_name = self.role_name or self.role_name_from_arn(instance_profile_arn)

        credentials = self.get_role_credentials(role_name, region)

        logger.info(
            f"已获取临时凭证，区域：{region}，账号：{account_id}，角色：{role_name}，"
            f"access_key={credentials.access_key_id[:4]}...",
            module="metadata_client"
        )
        return InstanceMetadata(
            region=region,
            account_id=account_id,
            instance_profile_arn=instance_profile_arn,
            role_name=role_name,
            credentials=credentials
        )

    def close(self):
        """关闭HTTP会话"""
        self.session.close()
