import boto3
import os
from botocore.exceptions import ClientError
from dotenv import load_dotenv

load_dotenv()


def create_tables():
    region = os.environ.get('AWS_REGION', 'us-east-1')
    endpoint_url = os.environ.get('DYNAMODB_ENDPOINT_URL')
    print(f"Initializing DynamoDB tables in region: {region}")

    dynamodb = boto3.resource('dynamodb', region_name=region, endpoint_url=endpoint_url)

    tables = [
        {
            'TableName': os.environ.get('DYNAMODB_GENRES_TABLE', 'Genres'),
            'KeySchema': [{'AttributeName': 'id', 'KeyType': 'HASH'}],
            'AttributeDefinitions': [{'AttributeName': 'id', 'AttributeType': 'S'}]
        },
        {
            # One item per genre name; keeps names unique
            'TableName': os.environ.get('DYNAMODB_GENRE_NAMES_TABLE', 'GenreNames'),
            'KeySchema': [{'AttributeName': 'name', 'KeyType': 'HASH'}],
            'AttributeDefinitions': [{'AttributeName': 'name', 'AttributeType': 'S'}]
        },
        {
            'TableName': os.environ.get('DYNAMODB_BOOKS_TABLE', 'Books'),
            'KeySchema': [{'AttributeName': 'id', 'KeyType': 'HASH'}],
            'AttributeDefinitions': [{'AttributeName': 'id', 'AttributeType': 'S'}]
        },
        {
            'TableName': os.environ.get('DYNAMODB_AUTHORS_TABLE', 'Authors'),
            'KeySchema': [{'AttributeName': 'id', 'KeyType': 'HASH'}],
            'AttributeDefinitions': [{'AttributeName': 'id', 'AttributeType': 'S'}]
        },
        {
            'TableName': os.environ.get('DYNAMODB_BOOK_INSTANCES_TABLE', 'BookInstances'),
            'KeySchema': [{'AttributeName': 'id', 'KeyType': 'HASH'}],
            'AttributeDefinitions': [{'AttributeName': 'id', 'AttributeType': 'S'}]
        }
    ]

    for table_config in tables:
        try:
            print(f"Creating table {table_config['TableName']}...")
            table = dynamodb.create_table(
                TableName=table_config['TableName'],
                KeySchema=table_config['KeySchema'],
                AttributeDefinitions=table_config['AttributeDefinitions'],
                BillingMode='PAY_PER_REQUEST'
            )
            table.wait_until_exists()
            print(f"Table {table_config['TableName']} created successfully.")
        except ClientError as e:
            if e.response['Error']['Code'] == 'ResourceInUseException':
                print(f"Table {table_config['TableName']} already exists.")
            else:
                print(f"Error creating table {table_config['TableName']}: {e}")

if __name__ == '__main__':
    create_tables()
